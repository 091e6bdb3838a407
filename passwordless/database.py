"""Postgres adapter for the sign-in flows.

Tables: users, accounts, sessions, verification_tokens.
Extra user attributes (forwarded callback params) live in users.attributes (JSONB).
"""

from typing import Any

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from passwordless.types import Account, Session, User, VerificationToken
from utils.timezone import now_utc


def _row_to_user(row: dict[str, Any]) -> User:
    attributes = row.get("attributes") or {}
    return User(
        **attributes,
        id=str(row["id"]),
        email=row["email"],
        email_verified=row["email_verified"],
    )


class AuthDatabase:
    """Adapter implementation over PostgresClient."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive)."""
        row = self._db.execute_single(
            """SELECT id, email, email_verified, attributes
               FROM users WHERE email = lower(%s)""",
            (email,),
        )
        if row is None:
            return None
        return _row_to_user(row)

    def create_user(self, data: dict[str, Any]) -> User:
        """Create user from email/email_verified; other keys go to attributes."""
        attributes = {
            k: v for k, v in data.items() if k not in ("id", "email", "email_verified")
        }
        rows = self._db.execute_returning(
            """INSERT INTO users (email, email_verified, attributes)
               VALUES (lower(%s), %s, %s)
               RETURNING id, email, email_verified, attributes""",
            (data["email"], data.get("email_verified"), Json(attributes)),
        )
        return _row_to_user(rows[0])

    def link_account(self, account: Account) -> None:
        """Attach a provider account to a user. Re-linking is a no-op."""
        self._db.execute_returning(
            """INSERT INTO accounts (user_id, provider, type, provider_account_id)
               VALUES (%s, %s, %s, %s)
               ON CONFLICT (provider, provider_account_id) DO NOTHING
               RETURNING user_id""",
            (account.user_id, account.provider, account.type, account.provider_account_id),
        )

    def create_session(self, session: Session) -> Session:
        rows = self._db.execute_returning(
            """INSERT INTO sessions (session_token, user_id, expires)
               VALUES (%s, %s, %s)
               RETURNING session_token, user_id, expires""",
            (session.session_token, session.user_id, session.expires),
        )
        row = rows[0]
        return Session(
            session_token=row["session_token"],
            user_id=str(row["user_id"]),
            expires=row["expires"],
        )

    def create_verification_token(self, token: VerificationToken) -> None:
        """Store verification token (already hashed)."""
        self._db.execute_returning(
            """INSERT INTO verification_tokens (identifier, token, expires)
               VALUES (%s, %s, %s)
               RETURNING token""",
            (token.identifier, token.token, token.expires),
        )

    def use_verification_token(self, identifier: str, token: str) -> VerificationToken | None:
        """Delete and return the token in one statement; None if already gone."""
        rows = self._db.execute_returning(
            """DELETE FROM verification_tokens
               WHERE identifier = %s AND token = %s
               RETURNING identifier, token, expires""",
            (identifier, token),
        )
        if not rows:
            return None
        row = rows[0]
        return VerificationToken(
            identifier=row["identifier"],
            token=row["token"],
            expires=row["expires"],
        )

    def cleanup_expired_tokens(self) -> int:
        """Delete expired tokens. Returns count deleted."""
        rows = self._db.execute_returning(
            """DELETE FROM verification_tokens
               WHERE expires < %s
               RETURNING token""",
            (now_utc(),),
        )
        return len(rows)
