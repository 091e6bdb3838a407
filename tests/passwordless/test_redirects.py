"""Tests for passwordless/redirects.py - outcome to URL mapping."""

import pytest

from passwordless.config import AuthConfig
from passwordless.exceptions import (
    CSRFError,
    DeliveryError,
    NormalizationError,
    PersistenceError,
    SignInDenied,
    SignInErrorType,
    TokenNotFoundOrExpired,
)
from passwordless.redirects import OutcomeRouter

AUTH_URL = "http://localhost:3000/api/auth"


@pytest.fixture
def router(config):
    return OutcomeRouter(config)


class TestErrorRedirects:
    """Every flow error maps to one error page URL."""

    @pytest.mark.parametrize(
        "err, expected",
        [
            (CSRFError(), f"{AUTH_URL}/error?error=EmailSignin&provider=email"),
            (NormalizationError(), f"{AUTH_URL}/error?error=EmailSignin&provider=email"),
            (SignInDenied(), f"{AUTH_URL}/error?error=AccessDenied"),
            (TokenNotFoundOrExpired(), f"{AUTH_URL}/error?error=Verification&provider=email"),
            (DeliveryError(), f"{AUTH_URL}/error?error=EmailSignin&provider=email"),
            (PersistenceError(), f"{AUTH_URL}/error?error=Callback&provider=email"),
        ],
    )
    def test_error_table(self, router, err, expected):
        assert router.for_error(err, "email") == expected

    def test_denial_redirect_wins(self, router):
        assert router.for_error(SignInDenied(redirect="/go-away"), "email") == "/go-away"

    def test_unknown_provider_omitted(self, router):
        assert router.error(SignInErrorType.VERIFICATION) == f"{AUTH_URL}/error?error=Verification"


class TestSuccessRedirects:

    def test_verify_request(self, router):
        assert router.verify_request("email") == f"{AUTH_URL}/verify-request?provider=email&type=email"

    def test_signed_in_defaults_to_site_root(self, router):
        assert router.signed_in() == "http://localhost:3000"

    def test_respects_custom_base_path(self):
        router = OutcomeRouter(
            AuthConfig(
                secret="x" * 16,
                app_base_url="https://app.example.com/",
                auth_base_path="/auth/",
            )
        )
        assert router.verify_request("email") == (
            "https://app.example.com/auth/verify-request?provider=email&type=email"
        )


class TestCallbackLink:

    def test_reserved_params_not_overridden(self, router):
        link = router.callback_link(
            "email",
            token="tok",
            identifier="a@x.com",
            extra_params={"email": "b@y.com", "callbackUrl": "https://evil.example", "foo": "bar"},
        )

        assert link == (
            f"{AUTH_URL}/callback/email?callbackUrl=http%3A%2F%2Flocalhost%3A3000"
            "&token=tok&email=a%40x.com&foo=bar"
        )
