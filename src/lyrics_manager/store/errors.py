"""Errors raised by the catalog store."""


class CatalogError(Exception):
    """Base class for catalog store errors."""


class NotFoundError(CatalogError):
    """An operation referenced an identity absent from the store.

    Attributes:
        kind: Entity kind ("song" or "set list")
        entity_id: The identity that could not be resolved
    """

    def __init__(self, kind: str, entity_id: str, message: str = ""):
        super().__init__(message or f"{kind.capitalize()} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class ValidationRejectedError(CatalogError):
    """Caller-supplied indices failed a bounds check."""
