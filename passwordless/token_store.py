"""Verification tokens in Valkey.

One key per (identifier, hashed token) with a TTL matching the token expiry.
Consumption uses GETDEL so a token can be taken exactly once.
"""

from datetime import datetime

from clients.valkey_client import ValkeyClient
from passwordless.types import VerificationToken
from utils.timezone import now_utc, parse_iso


class ValkeyTokenStore:
    """VerificationTokenStore backed by Valkey."""

    KEY_PREFIX = "verification:"

    def __init__(self, valkey: ValkeyClient):
        self._valkey = valkey

    def _key(self, identifier: str, token: str) -> str:
        """Generate Valkey key for a token (token is already hashed)."""
        return f"{self.KEY_PREFIX}{identifier}:{token}"

    def create_verification_token(self, token: VerificationToken) -> None:
        ttl = int((token.expires - now_utc()).total_seconds())
        self._valkey.set_json(
            self._key(token.identifier, token.token),
            {
                "identifier": token.identifier,
                "expires": token.expires.isoformat(),
            },
            expire_seconds=max(ttl, 1),
        )

    def use_verification_token(self, identifier: str, token: str) -> VerificationToken | None:
        data = self._valkey.getdel_json(self._key(identifier, token))
        if data is None:
            return None

        expires: datetime = parse_iso(data["expires"])
        return VerificationToken(
            identifier=data["identifier"],
            token=token,
            expires=expires,
        )
