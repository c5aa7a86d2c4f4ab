"""
Catalog Exceptions

Typed failures raised by the service layer. Services never raise
HTTPException; catalog.main maps each kind to a status code.

- NotFoundError: a specific book/review was requested and does not exist
  (or is logically deleted)
- ConflictError: a unique key (ISBN) collides with a live record
- InvalidArgumentError: malformed input such as pagination parameters
- StorageFailureError: the database could not perform the operation
"""


class CatalogError(Exception):
    """Base class for catalog service errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CatalogError):
    """Requested resource has no matching non-deleted record."""

    def __init__(self, resource: str, resource_id: int) -> None:
        super().__init__(f"{resource} with id {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(CatalogError):
    """Creation or update collides with an existing unique key."""


class InvalidArgumentError(CatalogError):
    """Request parameters are malformed."""


class StorageFailureError(CatalogError):
    """Underlying store was unreachable or rejected the write."""
