"""Application error taxonomy shared by services and the API layer."""

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or out-of-policy input."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error", status.HTTP_400_BAD_REQUEST)


class NotFoundError(AppError):
    """Referenced family, unit, member or payment does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    """Uniqueness violation reported by the store."""

    def __init__(self, message: str = "Record already exists"):
        super().__init__(message, "conflict", status.HTTP_409_CONFLICT)


class DependencyError(AppError):
    """An external collaborator (e-mail channel) is unavailable."""

    def __init__(self, message: str = "Dependency unavailable"):
        super().__init__(message, "dependency_unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)


__all__ = [
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "DependencyError",
]
