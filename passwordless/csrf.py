"""Double-submit CSRF protection for the sign-in form.

The cookie holds `signature.payload`. `payload` is the token the page embeds
in the form, `signature` is HMAC-SHA256 of the payload keyed with the auth
secret. A submission is valid only if the form value equals the payload and
the signature verifies.
"""

import hashlib
import hmac
import secrets

from passwordless.types import CsrfToken


def _sign(payload: str, secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def _verified_payload(cookie_value: str | None, secret: str) -> str | None:
    """Return the cookie's payload if its signature checks out, else None."""
    if not cookie_value:
        return None

    signature, sep, payload = cookie_value.partition(".")
    if not sep or not signature or not payload:
        return None

    expected = _sign(payload, secret)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        return None

    return payload


def validate_csrf_token(
    cookie_value: str | None,
    submitted_value: str | None,
    secret: str,
) -> bool:
    """Check a submitted CSRF token against the signed cookie.

    Returns False for a missing cookie, a malformed cookie, a bad signature,
    or a submitted value that differs from the cookie payload.
    """
    if not submitted_value:
        return False

    payload = _verified_payload(cookie_value, secret)
    if payload is None:
        return False

    return hmac.compare_digest(payload.encode("utf-8"), submitted_value.encode("utf-8"))


def create_csrf_token(secret: str, cookie_value: str | None = None) -> CsrfToken:
    """Reuse the token from a valid cookie, or mint a new token and cookie."""
    payload = _verified_payload(cookie_value, secret)
    if payload is not None:
        return CsrfToken(value=payload, cookie=None, verified=True)

    payload = secrets.token_hex(32)
    return CsrfToken(
        value=payload,
        cookie=f"{_sign(payload, secret)}.{payload}",
        verified=False,
    )
