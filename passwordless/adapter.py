"""Persistence contracts the sign-in flows depend on.

Implementations: `passwordless.database.AuthDatabase` (Postgres) and
`passwordless.token_store.ValkeyTokenStore` (verification tokens only).
"""

from typing import Any, Protocol

from passwordless.types import Account, Session, User, VerificationToken


class VerificationTokenStore(Protocol):
    """Create and atomically consume one-time verification tokens."""

    def create_verification_token(self, token: VerificationToken) -> None:
        """Store a token. Several tokens per identifier may coexist."""
        ...

    def use_verification_token(self, identifier: str, token: str) -> VerificationToken | None:
        """
        Fetch and invalidate a token in one atomic step.

        Returns None if the token does not exist or was already used. Of two
        concurrent callers for the same token at most one gets it back.
        """
        ...


class Adapter(VerificationTokenStore, Protocol):
    """Users, accounts and sessions, plus the verification token store."""

    def get_user_by_email(self, email: str) -> User | None:
        ...

    def create_user(self, data: dict[str, Any]) -> User:
        """Create a user from `email`, `email_verified` and any extra attributes."""
        ...

    def link_account(self, account: Account) -> None:
        ...

    def create_session(self, session: Session) -> Session:
        ...
