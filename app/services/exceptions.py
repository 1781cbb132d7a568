"""Domain errors raised by the service layer.

Routers never build error responses for these themselves: the handlers
registered in ``main.py`` translate each one into the standard error envelope.
"""


class ServiceError(Exception):
    """Base class for errors a caller is allowed to see."""

    code = "SERVICE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(ServiceError):
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class NotFoundError(ServiceError):
    """Resource is absent or not owned by the caller (never distinguished)."""

    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class RaceValidationError(ServiceError):
    """First failing field of a race payload."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
