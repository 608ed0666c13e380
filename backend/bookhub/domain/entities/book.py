"""Domain entities — pure Python business objects, no framework dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Book:
    """Core domain entity representing a catalog item.

    ``price`` is stored in minor currency units. ``updated_at`` tracks the
    last *content* change only; storefront clients classify books as
    "recently updated" from it, so writes that leave every content field
    untouched must keep it as is.
    """

    CONTENT_FIELDS: ClassVar[tuple[str, ...]] = (
        "title",
        "author",
        "genre",
        "year",
        "price",
        "isbn",
        "cover_url",
        "description",
        "stock",
    )
    OPTIONAL_FIELDS: ClassVar[frozenset[str]] = frozenset({"isbn", "cover_url", "description"})

    title: str
    author: str
    genre: str
    year: int
    price: int
    isbn: str | None = None
    cover_url: str | None = None
    description: str | None = None
    stock: int = 0
    id: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        # A new book starts unmodified
        if self.updated_at is None:
            self.updated_at = self.created_at

    def apply_changes(self, **changes: Any) -> bool:
        """Apply content changes and advance ``updated_at`` only if one differs.

        ``None`` clears an optional field and is ignored for required ones.
        Returns True when at least one content field actually changed.
        """
        unknown = set(changes) - set(self.CONTENT_FIELDS)
        if unknown:
            raise ValueError(f"Not a content field of Book: {', '.join(sorted(unknown))}")

        changed = False
        for name, value in changes.items():
            if value is None and name not in self.OPTIONAL_FIELDS:
                continue
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed = True

        if changed:
            self.touch()
        return changed

    def touch(self) -> None:
        """Advance ``updated_at`` to now, strictly past its previous value."""
        now = _utcnow()
        floor = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now if now >= floor else floor

    def content(self) -> dict[str, Any]:
        """Snapshot of the content fields, used for equality checks in tests and imports."""
        return {name: getattr(self, name) for name in self.CONTENT_FIELDS}
