"""Authentication service - orchestrates the email sign-in flows."""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

from passwordless.adapter import Adapter, VerificationTokenStore
from passwordless.config import AuthConfig
from passwordless.csrf import create_csrf_token, validate_csrf_token
from passwordless.exceptions import (
    AuthError,
    CSRFError,
    DeliveryError,
    NormalizationError,
    PersistenceError,
    SignInDenied,
    SignInErrorType,
    TokenNotFoundOrExpired,
    UnsupportedProviderError,
)
from passwordless.gate import SignInCallback, allow_all, authorize
from passwordless.providers import EmailProvider, hash_token
from passwordless.redirects import RESERVED_PARAMS, OutcomeRouter
from passwordless.security_logger import SecurityEvent, SecurityLogger
from passwordless.types import (
    Account,
    CsrfToken,
    EmailContext,
    RequestContext,
    Session,
    SignInContext,
    User,
    VerificationRequestParams,
    VerificationToken,
)
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Where to send the browser, plus the session on a completed sign-in."""

    redirect: str
    session: Session | None = None


# Which audit event each flow error is recorded as.
_ISSUANCE_EVENTS = {
    CSRFError: SecurityEvent.CSRF_REJECTED,
    NormalizationError: SecurityEvent.SIGNIN_EMAIL_ERROR,
    SignInDenied: SecurityEvent.ACCESS_DENIED,
    DeliveryError: SecurityEvent.SIGNIN_EMAIL_ERROR,
    UnsupportedProviderError: SecurityEvent.SIGNIN_ERROR,
}

_REDEMPTION_EVENTS = {
    TokenNotFoundOrExpired: SecurityEvent.VERIFICATION_FAILED,
    SignInDenied: SecurityEvent.ACCESS_DENIED,
    PersistenceError: SecurityEvent.CALLBACK_ERROR,
    UnsupportedProviderError: SecurityEvent.CALLBACK_ERROR,
}


class AuthService:
    """Orchestrates email sign-in.

    Handles:
    - Sign-in requests: CSRF check, normalization, sign-in callback, token
      creation, link delivery
    - Callbacks: token consumption, user creation, sign-in callback, session
      creation

    Every outcome is returned as a redirect. Errors never escape to the
    transport; they are logged and mapped to the error page.
    """

    def __init__(
        self,
        config: AuthConfig,
        adapter: Adapter,
        security_logger: SecurityLogger,
        provider: EmailProvider | None = None,
        sign_in_callback: SignInCallback | None = None,
        token_store: VerificationTokenStore | None = None,
    ):
        self._config = config
        self._adapter = adapter
        self._security_logger = security_logger
        self._provider = provider or EmailProvider()
        self._sign_in_callback = sign_in_callback or allow_all
        # Tokens live with the adapter unless a dedicated store is given
        self._tokens: VerificationTokenStore = token_store or adapter
        self._router = OutcomeRouter(config)

    @property
    def config(self) -> AuthConfig:
        return self._config

    def csrf_token(self, cookie_value: str | None) -> CsrfToken:
        """Token to embed in the sign-in form, reusing a valid cookie."""
        return create_csrf_token(self._config.secret, cookie_value)

    def _get_provider(self, provider_id: str) -> EmailProvider:
        if provider_id != self._provider.id:
            raise UnsupportedProviderError(f"Unknown provider '{provider_id}'")
        return self._provider

    def _authorize(self, user: User, account: Account, verification_request: bool) -> None:
        """Ask the sign-in callback. Raises SignInDenied on a veto."""
        decision = authorize(
            self._sign_in_callback,
            SignInContext(
                user=user,
                account=account,
                email=EmailContext(verification_request=verification_request),
            ),
        )
        if not decision.allowed:
            raise SignInDenied(redirect=decision.redirect)

    def _record(self, event: SecurityEvent, **kwargs) -> None:
        """Record a milestone. Audit failures never change the flow outcome."""
        try:
            self._security_logger.log(event, **kwargs)
        except Exception:
            logger.exception(f"Failed to record {event.value}")

    def _fail(
        self,
        err: Exception,
        events: dict,
        fallback_event: SecurityEvent,
        fallback_kind: SignInErrorType,
        provider_id: str,
        request: RequestContext,
        email: str | None = None,
    ) -> AuthResult:
        """Log a flow error and map it to its redirect."""
        event = events.get(type(err), fallback_event)
        try:
            self._security_logger.log_error(
                event,
                error=err.__cause__ or err,
                provider_id=provider_id,
                email=email,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
            )
        except Exception:
            logger.exception(f"Failed to record {event.value} for provider {provider_id}: {err}")

        if isinstance(err, AuthError):
            return AuthResult(redirect=self._router.for_error(err, provider_id))
        return AuthResult(redirect=self._router.error(fallback_kind, provider_id))

    # ------------------------------------------------------------------
    # Sign-in request
    # ------------------------------------------------------------------

    def request_verification(
        self,
        email: str,
        csrf_token: str | None,
        csrf_cookie: str | None,
        provider_id: str = "email",
        callback_url: str | None = None,
        request: RequestContext | None = None,
    ) -> AuthResult:
        """Handle a sign-in form submission.

        Flow:
        1. Validate CSRF token against the signed cookie
        2. Normalize the identifier
        3. Look up the user (read-only; nobody is created here)
        4. Ask the sign-in callback
        5. Create and store the verification token
        6. Send the sign-in link
        7. Redirect to the verify-request page

        A failed send does not remove the stored token.
        """
        request = request or RequestContext()

        try:
            provider = self._get_provider(provider_id)
            redirect = self._send_link(
                provider, email, csrf_token, csrf_cookie, callback_url, request
            )
        except Exception as e:
            return self._fail(
                e,
                _ISSUANCE_EVENTS,
                SecurityEvent.SIGNIN_EMAIL_ERROR,
                SignInErrorType.EMAIL_SIGNIN,
                provider_id,
                request,
            )

        return AuthResult(redirect=redirect)

    def _send_link(
        self,
        provider: EmailProvider,
        email: str,
        csrf_token: str | None,
        csrf_cookie: str | None,
        callback_url: str | None,
        request: RequestContext,
    ) -> str:
        if not validate_csrf_token(csrf_cookie, csrf_token, self._config.secret):
            raise CSRFError("CSRF token missing or invalid")

        try:
            identifier = provider.normalize_identifier(email)
        except Exception as e:
            raise NormalizationError(str(e)) from e
        if not identifier:
            raise NormalizationError("Identifier is empty")

        user = self._adapter.get_user_by_email(identifier)
        if user is None:
            user = User(id=identifier, email=identifier, email_verified=None)
        account = Account(
            user_id=user.id,
            provider=provider.id,
            provider_account_id=identifier,
        )

        self._authorize(user, account, verification_request=True)

        token = provider.generate_verification_token()
        max_age_hours = provider.max_age_hours or self._config.verification_token_max_age_hours
        expires = now_utc() + timedelta(hours=max_age_hours)

        self._tokens.create_verification_token(
            VerificationToken(
                identifier=identifier,
                token=hash_token(token, self._config.secret),
                expires=expires,
            )
        )

        self._record(
            SecurityEvent.VERIFICATION_REQUESTED,
            email=identifier,
            provider_id=provider.id,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
        )

        params = VerificationRequestParams(
            identifier=identifier,
            url=self._router.callback_link(
                provider.id, token, identifier, callback_url, request.query
            ),
            expires=expires,
            token=token,
            base_url=self._config.auth_url,
            provider_id=provider.id,
            request=request,
        )

        try:
            provider.send_verification_request(params)
        except Exception as e:
            raise DeliveryError(str(e)) from e

        self._record(
            SecurityEvent.VERIFICATION_SENT,
            email=identifier,
            provider_id=provider.id,
            ip_address=request.ip_address,
        )

        return self._router.verify_request(provider.id)

    # ------------------------------------------------------------------
    # Callback
    # ------------------------------------------------------------------

    def handle_callback(
        self,
        query: Mapping[str, str],
        provider_id: str = "email",
        request: RequestContext | None = None,
    ) -> AuthResult:
        """Redeem a sign-in link.

        Flow:
        1. Read token and email from the query
        2. Consume the verification token (expired counts as missing)
        3. Find the user, or create one and link the email account
        4. Ask the sign-in callback
        5. Create a session
        6. Redirect to callbackUrl (same origin only) or the site root

        Query params other than token, email and callbackUrl are passed to
        user creation as extra attributes. A veto after step 3 keeps the
        consumed token consumed and the created user in place.
        """
        request = request or RequestContext(query=dict(query))

        try:
            provider = self._get_provider(provider_id)
            return self._redeem(provider, query, request)
        except Exception as e:
            return self._fail(
                e,
                _REDEMPTION_EVENTS,
                SecurityEvent.CALLBACK_ERROR,
                SignInErrorType.CALLBACK,
                provider_id,
                request,
                email=query.get("email"),
            )

    def _redeem(
        self,
        provider: EmailProvider,
        query: Mapping[str, str],
        request: RequestContext,
    ) -> AuthResult:
        token = query.get("token")
        identifier = query.get("email")
        if not token or not identifier:
            raise TokenNotFoundOrExpired("Token and email are required")

        stored = self._tokens.use_verification_token(
            identifier, hash_token(token, self._config.secret)
        )
        if stored is None or stored.expires < now_utc():
            raise TokenNotFoundOrExpired("Invalid or expired token")

        extra_params = {k: v for k, v in query.items() if k not in RESERVED_PARAMS}

        try:
            user = self._adapter.get_user_by_email(identifier)
            account = Account(
                user_id=user.id if user else None,
                provider=provider.id,
                provider_account_id=identifier,
            )
            created = user is None
            if created:
                user = self._adapter.create_user(
                    {**extra_params, "email": identifier, "email_verified": None}
                )
                account = account.model_copy(update={"user_id": user.id})
                self._adapter.link_account(account)
        except Exception as e:
            raise PersistenceError(str(e)) from e

        if created:
            logger.info(f"Created user {user.id} for {provider.id} sign-in")
            self._record(
                SecurityEvent.USER_CREATED,
                email=identifier,
                user_id=user.id,
                provider_id=provider.id,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
            )
            self._record(
                SecurityEvent.ACCOUNT_LINKED,
                email=identifier,
                user_id=user.id,
                provider_id=provider.id,
            )

        self._authorize(user, account, verification_request=False)

        session = Session(
            session_token=secrets.token_urlsafe(32),
            user_id=user.id,
            expires=now_utc() + timedelta(hours=self._config.session_expiry_hours),
        )
        try:
            session = self._adapter.create_session(session) or session
        except Exception as e:
            raise PersistenceError(str(e)) from e

        self._record(
            SecurityEvent.SESSION_CREATED,
            email=identifier,
            user_id=user.id,
            provider_id=provider.id,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
        )

        return AuthResult(
            redirect=self._router.signed_in(query.get("callbackUrl")),
            session=session,
        )
