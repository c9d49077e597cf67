"""
Domain exceptions raised by the service layer.
The API layer maps each one to an HTTP status in mfgops.common.error_handlers.
"""


class MfgOpsError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MfgOpsError, ValueError):
    """Bad user input: missing field, non-positive quantity, duplicate name or specification."""


class NotFoundError(MfgOpsError, LookupError):
    """An entity expected to exist could not be found."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ReferenceInUseError(ValidationError):
    """Delete rejected because other records still reference the entity."""


class InvalidTransitionError(ValidationError):
    """Status change not allowed from the current status."""
