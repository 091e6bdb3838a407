"""Security event logging for the sign-in audit trail.

Append-only log to the security_events table. Error events are mirrored to
the application log so operators see them without querying the database.
"""

import logging
from enum import Enum
from typing import Any

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SecurityEvent(Enum):
    """Sign-in security event types."""

    VERIFICATION_REQUESTED = "verification_requested"
    VERIFICATION_SENT = "verification_sent"
    USER_CREATED = "user_created"
    ACCOUNT_LINKED = "account_linked"
    SESSION_CREATED = "session_created"

    # Error kinds
    CSRF_REJECTED = "CSRF_REJECTED"
    SIGNIN_ERROR = "SIGNIN_ERROR"
    SIGNIN_EMAIL_ERROR = "SIGNIN_EMAIL_ERROR"
    ACCESS_DENIED = "ACCESS_DENIED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    CALLBACK_ERROR = "CALLBACK_ERROR"


ERROR_EVENTS = frozenset({
    SecurityEvent.CSRF_REJECTED,
    SecurityEvent.SIGNIN_ERROR,
    SecurityEvent.SIGNIN_EMAIL_ERROR,
    SecurityEvent.ACCESS_DENIED,
    SecurityEvent.VERIFICATION_FAILED,
    SecurityEvent.CALLBACK_ERROR,
})


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: str | None = None,
        provider_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log security event to database."""
        if event in ERROR_EVENTS:
            logger.error(f"{event.value}: provider={provider_id} details={details}")

        self._db.execute_returning(
            """INSERT INTO security_events
               (event_type, email, user_id, provider_id, ip_address, user_agent, details, created_at)
               VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
               RETURNING id""",
            (
                event.value,
                email,
                user_id,
                provider_id,
                ip_address,
                user_agent,
                Json(details) if details else None,
                now_utc(),
            ),
        )

    def log_error(
        self,
        event: SecurityEvent,
        error: BaseException,
        provider_id: str | None,
        email: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Log a flow error as {error_kind, provider_id, error}."""
        self.log(
            event,
            email=email,
            provider_id=provider_id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={
                "error_kind": event.value,
                "provider_id": provider_id,
                "error": f"{type(error).__name__}: {error}",
            },
        )
