"""Service-level failures, each tied to the HTTP status it surfaces as."""


class ServiceError(Exception):
    """Base class for failures raised by the service layer."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed or missing input."""

    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthenticatedError(ServiceError):
    """No valid session."""

    status_code = 401
    code = "UNAUTHENTICATED"


class ForbiddenError(ServiceError):
    """Authenticated, but lacking the role or ownership required."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    """The addressed entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ServiceError):
    """The entity still has dependents and cannot be removed."""

    status_code = 400
    code = "CONFLICT"


class UnexpectedError(ServiceError):
    """Store or renderer failure."""

    status_code = 500
    code = "INTERNAL_ERROR"
