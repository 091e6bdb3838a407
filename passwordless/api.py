"""HTTP routes for email sign-in."""

import ipaddress

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

from api.base import ErrorCodes, error_response, success_response
from passwordless.service import AuthService
from passwordless.types import EmailSignInRequest, RequestContext


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def _request_context(request: Request) -> RequestContext:
    return RequestContext(
        query=dict(request.query_params),
        ip_address=_get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )


async def _read_sign_in_body(request: Request) -> EmailSignInRequest | None:
    """Sign-in body from JSON or a regular form post."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        else:
            data = dict(await request.form())
        return EmailSignInRequest.model_validate(data)
    except ValueError:
        return None


def create_auth_router(auth_service: AuthService) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["auth"])
    config = auth_service.config

    @router.get("/csrf")
    async def get_csrf_token(request: Request):
        """Return the CSRF token for the sign-in form, setting the cookie if needed."""
        csrf = auth_service.csrf_token(request.cookies.get(config.csrf_cookie_name))
        response = JSONResponse(
            content=success_response({"csrf_token": csrf.value}).model_dump(mode="json"),
        )
        if csrf.cookie:
            response.set_cookie(
                key=config.csrf_cookie_name,
                value=csrf.cookie,
                httponly=True,
                secure=config.app_base_url.startswith("https://"),
                samesite="lax",
            )
        return response

    @router.post("/signin/{provider_id}")
    async def sign_in(provider_id: str, request: Request):
        """Submit the sign-in form. Always answers with a redirect."""
        body = await _read_sign_in_body(request)
        if body is None:
            return JSONResponse(
                status_code=400,
                content=error_response(
                    ErrorCodes.INVALID_REQUEST,
                    "Email is required",
                ).model_dump(mode="json"),
            )

        result = auth_service.request_verification(
            email=body.email,
            csrf_token=body.csrf_token,
            csrf_cookie=request.cookies.get(config.csrf_cookie_name),
            provider_id=provider_id,
            callback_url=body.callback_url,
            request=_request_context(request),
        )
        return RedirectResponse(result.redirect, status_code=302)

    @router.get("/callback/{provider_id}")
    async def callback(provider_id: str, request: Request):
        """Redeem a sign-in link. Sets the session cookie on success."""
        context = _request_context(request)
        result = auth_service.handle_callback(
            context.query,
            provider_id=provider_id,
            request=context,
        )

        response = RedirectResponse(result.redirect, status_code=302)
        if result.session is not None:
            response.set_cookie(
                key=config.session_cookie_name,
                value=result.session.session_token,
                httponly=True,
                secure=config.app_base_url.startswith("https://"),
                samesite="lax",
                expires=result.session.expires,
            )
        return response

    return router
