"""Exponential reconnection backoff with jitter."""

import random


class Backoff:
    """Delay before reconnection attempt ``n`` (1-based).

    The base delay doubles each attempt, is spread by ``jitter`` in both
    directions and never exceeds ``max_delay``.
    """

    def __init__(
        self,
        min_delay: float = 1.0,
        max_delay: float = 5.0,
        *,
        factor: float = 2.0,
        jitter: float = 0.5,
        rng: random.Random | None = None,
    ) -> None:
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError("expected 0 <= min_delay <= max_delay")
        if not 0 <= jitter < 1:
            raise ValueError("jitter must be in [0, 1)")
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.factor = factor
        self.jitter = jitter
        self._rng = rng or random.Random()

    def duration(self, attempt: int) -> float:
        if attempt < 1:
            raise ValueError("attempt numbers start at 1")
        delay = self.min_delay * self.factor ** (attempt - 1)
        if self.jitter:
            deviation = self._rng.random() * self.jitter * delay
            delay = delay + deviation if self._rng.random() < 0.5 else delay - deviation
        return min(delay, self.max_delay)
