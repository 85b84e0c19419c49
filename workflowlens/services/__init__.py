"""Service layer: business logic orchestration."""


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found."""


class ConflictError(ServiceError):
    """Business rule conflict."""


class ValidationError(ServiceError):
    """Input validation or state transition error."""
