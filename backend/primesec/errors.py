"""
Domain errors raised by the service layer.

The API layer maps these onto HTTP responses in ``primesec.main``:
NotFoundError -> 404, ValidationFailure -> 422. Store-level uniqueness
failures are left as ``sqlalchemy.exc.IntegrityError`` and surface as 409.
"""


class PrimeSecError(Exception):
    """Base class for all service-layer errors."""


class NotFoundError(PrimeSecError):
    """A referenced or targeted row does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class ValidationFailure(PrimeSecError):
    """Input is well-formed but violates a domain rule."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
