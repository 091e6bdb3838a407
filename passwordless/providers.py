"""Email provider definition and its default hooks."""

import hashlib
import secrets
from dataclasses import dataclass
from typing import Callable

from passwordless.types import VerificationRequestParams

Normalizer = Callable[[str], str]
DeliveryFn = Callable[[VerificationRequestParams], None]


def normalize_identifier(raw: str) -> str:
    """Default identifier normalizer.

    Only the first comma-separated address is kept; sign-in links go to a
    single recipient. No address validation happens here.
    """
    return raw.split(",")[0].strip().lower()


def generate_verification_token() -> str:
    """Fresh opaque token for a sign-in link."""
    return secrets.token_hex(32)


def hash_token(token: str, secret: str) -> str:
    """Hash a cleartext token for storage. Stores never see the cleartext."""
    return hashlib.sha256(f"{token}{secret}".encode("utf-8")).hexdigest()


def _delivery_not_configured(params: VerificationRequestParams) -> None:
    raise RuntimeError(
        f"No send_verification_request configured for provider '{params.provider_id}'"
    )


@dataclass(frozen=True)
class EmailProvider:
    """
    The email (magic link) sign-in method.

    Hooks are plain callables so deployments swap behavior without
    subclassing.
    """

    id: str = "email"
    name: str = "Email"
    type: str = "email"
    max_age_hours: int | None = None
    normalize_identifier: Normalizer = normalize_identifier
    generate_verification_token: Callable[[], str] = generate_verification_token
    send_verification_request: DeliveryFn = _delivery_not_configured
