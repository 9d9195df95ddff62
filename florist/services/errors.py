class FloristError(Exception):
    """Base class for failures raised by the service layer."""


class ValidationError(FloristError, ValueError):
    """Malformed or missing input. Raised before anything is written."""


class NotFound(FloristError):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class StorageError(FloristError):
    """The database call failed. The surrounding transaction has been rolled back."""


class ConcurrencyError(FloristError):
    """Another writer changed the record first. Reload and retry."""


class DuplicateRecord(StorageError):
    """A unique column (idempotency key, supplier name) already holds this value."""
