"""Abstract interface (port) for an external book catalog used for imports."""

from abc import ABC, abstractmethod
from typing import Any


class BookCatalogProvider(ABC):
    """Port for searching a public book catalog (e.g. Google Books)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    async def search(self, query: str, max_results: int = 20) -> list[dict[str, Any]]:
        """Return raw volume resources matching ``query``."""
        ...
