"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Built once at startup and passed explicitly to everything that needs it.
    Instances are frozen so neither flow can mutate shared settings.
    """

    model_config = {"frozen": True}

    secret: str = Field(
        ...,
        description="Signs CSRF cookies and hashes verification tokens",
        min_length=16,
    )

    # URLs
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Site root; default destination after sign-in",
    )
    auth_base_path: str = Field(
        default="/api/auth",
        description="Path the auth routes are mounted under",
    )

    # Verification token settings
    verification_token_max_age_hours: int = Field(
        default=24,
        description="How long an emailed sign-in link remains valid",
        ge=1,
        le=168,
    )

    # Session settings
    session_expiry_hours: int = Field(
        default=720,  # 30 days
        description="Session lifetime in hours",
        ge=1,
        le=2160,
    )

    # Cookies
    csrf_cookie_name: str = Field(
        default="passwordless.csrf-token",
        description="Cookie holding the signed CSRF token",
    )
    session_cookie_name: str = Field(
        default="session_token",
        description="Cookie holding the session token",
    )

    @property
    def auth_url(self) -> str:
        """Absolute URL of the auth routes, without trailing slash."""
        base = self.app_base_url.rstrip("/")
        path = self.auth_base_path.strip("/")
        return f"{base}/{path}" if path else base
