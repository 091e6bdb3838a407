"""Typed exceptions for sign-in failures."""

from enum import Enum


class SignInErrorType(str, Enum):
    """Error codes carried on the error page redirect."""

    EMAIL_SIGNIN = "EmailSignin"
    ACCESS_DENIED = "AccessDenied"
    VERIFICATION = "Verification"
    CALLBACK = "Callback"
    CONFIGURATION = "Configuration"


class AuthError(Exception):
    """Base class for sign-in errors."""

    kind: SignInErrorType = SignInErrorType.CONFIGURATION


class CSRFError(AuthError):
    """CSRF cookie missing, malformed, or not matching the submitted token."""

    kind = SignInErrorType.EMAIL_SIGNIN


class NormalizationError(AuthError):
    """The identifier normalizer rejected the submitted value."""

    kind = SignInErrorType.EMAIL_SIGNIN


class SignInDenied(AuthError):
    """
    The sign-in callback vetoed the attempt.

    Carries the redirect the callback asked for, if any.
    """

    kind = SignInErrorType.ACCESS_DENIED

    def __init__(self, message: str = "Sign-in denied", redirect: str | None = None):
        self.redirect = redirect
        super().__init__(message)


class TokenNotFoundOrExpired(AuthError):
    """
    Verification token is unknown, already used, or expired.

    The three cases are deliberately indistinguishable to callers.
    """

    kind = SignInErrorType.VERIFICATION


class DeliveryError(AuthError):
    """Sending the verification link failed. The token was already stored."""

    kind = SignInErrorType.EMAIL_SIGNIN


class PersistenceError(AuthError):
    """A persistence collaborator failed while creating a user or session."""

    kind = SignInErrorType.CALLBACK


class UnsupportedProviderError(AuthError):
    """Request named a provider this service is not configured with."""

    kind = SignInErrorType.CONFIGURATION
