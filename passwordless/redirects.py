"""Maps every sign-in outcome to the URL the browser is sent to."""

from typing import Mapping
from urllib.parse import urlencode, urlsplit

from passwordless.config import AuthConfig
from passwordless.exceptions import AuthError, SignInDenied, SignInErrorType

# Query keys the flows own; never taken from forwarded params.
RESERVED_PARAMS = ("callbackUrl", "token", "email")


class OutcomeRouter:
    """Builds redirect URLs for both sign-in flows.

    Error URLs carry the provider id when it is known, except AccessDenied,
    which stays provider-agnostic. Not-found and expired tokens share one URL.
    """

    def __init__(self, config: AuthConfig):
        self._config = config

    def error(self, kind: SignInErrorType, provider_id: str | None = None) -> str:
        params = {"error": kind.value}
        if provider_id and kind is not SignInErrorType.ACCESS_DENIED:
            params["provider"] = provider_id
        return f"{self._config.auth_url}/error?{urlencode(params)}"

    def for_error(self, err: AuthError, provider_id: str | None = None) -> str:
        """Redirect for a caught flow error. A callback-supplied redirect wins."""
        if isinstance(err, SignInDenied) and err.redirect:
            return err.redirect
        return self.error(err.kind, provider_id)

    def verify_request(self, provider_id: str) -> str:
        params = {"provider": provider_id, "type": "email"}
        return f"{self._config.auth_url}/verify-request?{urlencode(params)}"

    def callback_link(
        self,
        provider_id: str,
        token: str,
        identifier: str,
        callback_url: str | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        """The link delivered to the user. Extra params are echoed into it."""
        params = {
            "callbackUrl": self.safe_callback_url(callback_url),
            "token": token,
            "email": identifier,
        }
        for key, value in (extra_params or {}).items():
            if key not in RESERVED_PARAMS:
                params[key] = value
        return f"{self._config.auth_url}/callback/{provider_id}?{urlencode(params)}"

    def signed_in(self, callback_url: str | None = None) -> str:
        return self.safe_callback_url(callback_url)

    def safe_callback_url(self, url: str | None) -> str:
        """Allow relative paths and same-origin URLs; anything else goes to the site root."""
        base = self._config.app_base_url.rstrip("/")
        if not url:
            return base

        if url.startswith("/") and not url.startswith("//"):
            return f"{base}{url}"

        target = urlsplit(url)
        origin = urlsplit(base)
        if (target.scheme, target.netloc) == (origin.scheme, origin.netloc):
            return url

        return base
