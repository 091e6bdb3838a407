"""Shared test fixtures for the passwordless test suite."""

from pathlib import Path
from typing import Any
from unittest.mock import Mock
from uuid import uuid4

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton so tests never reuse a real connection
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from passwordless.config import AuthConfig
from passwordless.csrf import create_csrf_token
from passwordless.security_logger import SecurityLogger
from passwordless.types import Account, Session, User, VerificationToken


# =============================================================================
# CONSTANTS
# =============================================================================

TEST_SECRET = "test-secret-0123456789abcdef"
TEST_EMAIL = "email@example.com"


# =============================================================================
# FAKES
# =============================================================================


class InMemoryAdapter:
    """Adapter keeping everything in dicts. Token consumption is single-use."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.accounts: list[Account] = []
        self.sessions: list[Session] = []
        self.tokens: dict[tuple[str, str], VerificationToken] = {}

    def get_user_by_email(self, email: str) -> User | None:
        return self.users.get(email)

    def create_user(self, data: dict[str, Any]) -> User:
        user = User(id=str(uuid4()), **data)
        self.users[user.email] = user
        return user

    def link_account(self, account: Account) -> None:
        self.accounts.append(account)

    def create_session(self, session: Session) -> Session:
        self.sessions.append(session)
        return session

    def create_verification_token(self, token: VerificationToken) -> None:
        self.tokens[(token.identifier, token.token)] = token

    def use_verification_token(self, identifier: str, token: str) -> VerificationToken | None:
        return self.tokens.pop((identifier, token), None)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def config() -> AuthConfig:
    """Config matching a local deployment."""
    return AuthConfig(secret=TEST_SECRET)


@pytest.fixture
def store() -> InMemoryAdapter:
    """Backing state of the adapter fixture."""
    return InMemoryAdapter()


@pytest.fixture
def adapter(store) -> Mock:
    """In-memory adapter wrapped in a Mock to record calls."""
    return Mock(wraps=store)


@pytest.fixture
def security_logger() -> Mock:
    """Mock SecurityLogger - no database writes in tests."""
    return Mock(spec=SecurityLogger)


@pytest.fixture
def csrf(config):
    """A freshly minted CSRF token and cookie."""
    return create_csrf_token(config.secret)
