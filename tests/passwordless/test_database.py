"""Tests for AuthDatabase - Postgres adapter (SQL client mocked)."""

from datetime import timedelta
from unittest.mock import Mock
from uuid import UUID

import pytest

from clients.postgres_client import PostgresClient
from passwordless.database import AuthDatabase
from passwordless.types import Account, Session, VerificationToken
from utils.timezone import now_utc

USER_ID = UUID("00000000-0000-0000-0000-000000000001")


@pytest.fixture
def db():
    return Mock(spec=PostgresClient)


@pytest.fixture
def auth_db(db):
    return AuthDatabase(db)


class TestUsers:

    def test_get_user_by_email_maps_row(self, auth_db, db):
        db.execute_single.return_value = {
            "id": USER_ID,
            "email": "a@x.com",
            "email_verified": None,
            "attributes": {"foo": "bar"},
        }

        user = auth_db.get_user_by_email("A@x.com")

        assert user.id == str(USER_ID)
        assert user.email == "a@x.com"
        assert user.foo == "bar"
        assert db.execute_single.call_args.args[1] == ("A@x.com",)
        assert "lower(%s)" in db.execute_single.call_args.args[0]

    def test_get_user_by_email_missing(self, auth_db, db):
        db.execute_single.return_value = None
        assert auth_db.get_user_by_email("nobody@x.com") is None

    def test_create_user_puts_extras_in_attributes(self, auth_db, db):
        db.execute_returning.return_value = [{
            "id": USER_ID,
            "email": "a@x.com",
            "email_verified": None,
            "attributes": {"foo": "bar"},
        }]

        user = auth_db.create_user({"email": "a@x.com", "email_verified": None, "foo": "bar"})

        email, verified, attributes = db.execute_returning.call_args.args[1]
        assert email == "a@x.com"
        assert verified is None
        assert attributes.adapted == {"foo": "bar"}
        assert user.foo == "bar"

    def test_link_account(self, auth_db, db):
        auth_db.link_account(
            Account(user_id=str(USER_ID), provider="email", provider_account_id="a@x.com")
        )

        assert db.execute_returning.call_args.args[1] == (
            str(USER_ID), "email", "email", "a@x.com",
        )


class TestSessions:

    def test_create_session_returns_stored_row(self, auth_db, db):
        expires = now_utc() + timedelta(days=30)
        db.execute_returning.return_value = [
            {"session_token": "tok", "user_id": USER_ID, "expires": expires}
        ]

        session = auth_db.create_session(
            Session(session_token="tok", user_id=str(USER_ID), expires=expires)
        )

        assert session.session_token == "tok"
        assert session.user_id == str(USER_ID)
        assert session.expires == expires


class TestVerificationTokens:

    def test_create_verification_token(self, auth_db, db):
        expires = now_utc()
        auth_db.create_verification_token(
            VerificationToken(identifier="a@x.com", token="hashed", expires=expires)
        )

        assert db.execute_returning.call_args.args[1] == ("a@x.com", "hashed", expires)

    def test_use_verification_token_deletes_and_returns(self, auth_db, db):
        expires = now_utc()
        db.execute_returning.return_value = [
            {"identifier": "a@x.com", "token": "hashed", "expires": expires}
        ]

        token = auth_db.use_verification_token("a@x.com", "hashed")

        assert token == VerificationToken(identifier="a@x.com", token="hashed", expires=expires)
        assert db.execute_returning.call_args.args[0].lstrip().startswith("DELETE")

    def test_use_verification_token_already_used(self, auth_db, db):
        db.execute_returning.return_value = []
        assert auth_db.use_verification_token("a@x.com", "hashed") is None

    def test_cleanup_expired_tokens_counts(self, auth_db, db):
        db.execute_returning.return_value = [{"token": "a"}, {"token": "b"}]
        assert auth_db.cleanup_expired_tokens() == 2
