"""Generic auth failure kinds raised by the credential store and session manager."""


class AuthError(Exception):
    """Base class; routes translate subclasses to HTTP responses."""

    default_message = "Authentication failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    """Wrong email or password; never says which."""

    default_message = "Invalid email or password."


class DuplicateEmail(AuthError):
    default_message = "Email is already registered."


class InvalidRefreshToken(AuthError):
    """Malformed, expired or unverifiable refresh token, or refresh processing failed."""

    default_message = "Invalid refresh token."


class AccessDenied(AuthError):
    """Refresh token does not match the stored hash, or the user is logged out."""

    default_message = "Access denied."
