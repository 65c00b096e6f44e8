"""
Error taxonomy shared by services and route handlers.

Services raise these; the exception handlers in main render them into the
``{ok: false, error: {...}}`` envelope.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"message": self.message}
        if self.code is not None:
            error["code"] = self.code
        if self.details is not None:
            error["details"] = self.details
        return error


class ValidationError(AppError):
    """Missing or malformed input fields"""
    status_code = 400


class InvalidBodyError(ValidationError):
    """Request body could not be decoded as a JSON object"""

    def __init__(self, message: str = "Invalid JSON in request body", **kwargs):
        super().__init__(message, **kwargs)


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class ConfigurationError(AppError):
    """Provider credentials are not configured"""
    status_code = 500


class ProviderError(AppError):
    """Rejection reported by the hosted auth provider; carries its message, code and status"""
    status_code = 500

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None, **kwargs):
        if status is not None and 400 <= status < 600:
            kwargs.setdefault("status_code", status)
        super().__init__(message, code=code, **kwargs)
        self.status = status


class ProfileCreationError(AppError):
    status_code = 500

    def __init__(self, message: str = "Failed to create profile", **kwargs):
        super().__init__(message, **kwargs)
