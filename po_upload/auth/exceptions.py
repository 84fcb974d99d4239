class IdentityError(Exception):
    """Raised when the identity provider cannot be reached or answers unexpectedly."""


class AuthenticationError(IdentityError):
    """Raised when sign-in or sign-up is rejected."""
