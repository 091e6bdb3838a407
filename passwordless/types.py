"""Pydantic models for the sign-in domain."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    A user as the persistence adapter sees it.

    Extra attributes are kept so query params forwarded from the sign-in
    link reach user creation untouched.
    """

    model_config = ConfigDict(extra="allow", from_attributes=True)

    id: str
    email: str
    email_verified: datetime | None = None


class Account(BaseModel):
    """Links a user to the provider that authenticated them."""

    user_id: str | None = None
    provider: str = "email"
    type: Literal["email"] = "email"
    provider_account_id: str


class Session(BaseModel):
    """A database session created after a successful sign-in."""

    session_token: str = Field(..., description="Session token (opaque string)")
    user_id: str
    expires: datetime


class VerificationToken(BaseModel):
    """
    A one-time sign-in token awaiting redemption.

    `token` holds the hashed value; the cleartext only travels in the link.
    """

    identifier: str
    token: str
    expires: datetime


class CsrfToken(BaseModel):
    """CSRF token for the current request.

    `cookie` is only set when a new cookie has to be written.
    """

    value: str
    cookie: str | None = None
    verified: bool = False


class EmailContext(BaseModel):
    """Tells the sign-in callback which half of the email flow is running."""

    verification_request: bool


class SignInContext(BaseModel):
    """Everything the sign-in callback gets to decide on."""

    user: User
    account: Account
    email: EmailContext


class SignInDecision(BaseModel):
    """Outcome of the sign-in callback."""

    allowed: bool
    redirect: str | None = None


class RequestContext(BaseModel):
    """Transport details of the inbound request, for delivery and audit."""

    query: dict[str, str] = Field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None


class VerificationRequestParams(BaseModel):
    """Payload handed to the delivery function."""

    identifier: str
    url: str
    expires: datetime
    token: str
    base_url: str
    provider_id: str
    request: RequestContext


class EmailSignInRequest(BaseModel):
    """Body of the sign-in form."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    csrf_token: str | None = Field(default=None, alias="csrfToken")
    callback_url: str | None = Field(default=None, alias="callbackUrl")
