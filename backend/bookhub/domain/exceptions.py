"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str, existing: object | None = None):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        self.existing = existing
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class CatalogLookupError(Exception):
    """Raised when the external book catalog (Google Books) cannot be queried."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[google_books] {status_code}: {message}")
