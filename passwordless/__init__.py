"""Passwordless email sign-in: CSRF, verification tokens, sign-in callback, redirects."""

from passwordless.exceptions import (
    AuthError,
    CSRFError,
    NormalizationError,
    SignInDenied,
    SignInErrorType,
    TokenNotFoundOrExpired,
    DeliveryError,
    PersistenceError,
    UnsupportedProviderError,
)
from passwordless.types import (
    User,
    Account,
    Session,
    VerificationToken,
    CsrfToken,
    SignInContext,
    SignInDecision,
    VerificationRequestParams,
)
from passwordless.config import AuthConfig
from passwordless.csrf import create_csrf_token, validate_csrf_token
from passwordless.providers import EmailProvider, normalize_identifier
from passwordless.adapter import Adapter, VerificationTokenStore
from passwordless.gate import SignInCallback, authorize
from passwordless.redirects import OutcomeRouter
from passwordless.security_logger import SecurityLogger, SecurityEvent
from passwordless.service import AuthService, AuthResult
