"""Error taxonomy shared by services and translated to HTTP responses at the boundary."""

from typing import Any


class AppError(Exception):
    """Base error carrying a client-safe message and the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: Any, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message if isinstance(message, str) else repr(message))


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(AppError):
    """No credential, or the credential could not be read."""

    status_code = 401


class AuthorizationError(AppError):
    """Credential present but invalid, revoked, expired or insufficient."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Uniqueness or referential conflict with existing data."""

    status_code = 409


class ServerError(AppError):
    status_code = 500


class DuplicateEmailError(ConflictError):
    def __init__(self, message: str = "Email is already registered.") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Invalid email or password.") -> None:
        super().__init__(message)
