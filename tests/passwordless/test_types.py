"""Tests for passwordless/types.py - Pydantic models for the sign-in domain."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from passwordless.types import Account, EmailSignInRequest, User, VerificationToken


class TestUser:

    def test_extra_attributes_kept(self):
        user = User(id="1", email="a@x.com", foo="bar")
        assert user.foo == "bar"
        assert user.model_dump()["foo"] == "bar"

    def test_email_verified_defaults_to_none(self):
        assert User(id="1", email="a@x.com").email_verified is None


class TestAccount:

    def test_defaults_to_email_provider(self):
        account = Account(provider_account_id="a@x.com")
        assert account.provider == "email"
        assert account.type == "email"

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError):
            Account(provider_account_id="a@x.com", type="oauth")


class TestVerificationToken:

    def test_requires_expiry(self):
        with pytest.raises(ValidationError):
            VerificationToken(identifier="a@x.com", token="t")

    def test_valid(self):
        token = VerificationToken(
            identifier="a@x.com", token="t", expires=datetime.now(timezone.utc)
        )
        assert token.identifier == "a@x.com"


class TestEmailSignInRequest:

    def test_accepts_form_field_names(self):
        body = EmailSignInRequest.model_validate(
            {"email": "a@x.com", "csrfToken": "c", "callbackUrl": "/x"}
        )
        assert body.csrf_token == "c"
        assert body.callback_url == "/x"

    def test_email_required(self):
        with pytest.raises(ValidationError):
            EmailSignInRequest.model_validate({"csrfToken": "c"})
