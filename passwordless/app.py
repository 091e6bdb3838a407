"""Application factory wiring secrets, storage, email and routes together."""

import logging

from fastapi import FastAPI

from clients.email_client import EmailGatewayClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import (
    get_auth_secret,
    get_database_url,
    get_email_config,
    get_valkey_url,
)
from passwordless.api import create_auth_router
from passwordless.config import AuthConfig
from passwordless.database import AuthDatabase
from passwordless.gate import SignInCallback
from passwordless.providers import EmailProvider
from passwordless.security_logger import SecurityLogger
from passwordless.service import AuthService
from passwordless.token_store import ValkeyTokenStore

logger = logging.getLogger(__name__)


def build_auth_service(
    config: AuthConfig,
    sign_in_callback: SignInCallback | None = None,
) -> AuthService:
    """AuthService backed by Postgres (users, sessions) and Valkey (tokens)."""
    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())
    email_client = EmailGatewayClient(**get_email_config())

    return AuthService(
        config=config,
        adapter=AuthDatabase(postgres),
        security_logger=SecurityLogger(postgres),
        provider=EmailProvider(send_verification_request=email_client.send_verification_request),
        sign_in_callback=sign_in_callback,
        token_store=ValkeyTokenStore(valkey),
    )


def create_app(
    config: AuthConfig | None = None,
    auth_service: AuthService | None = None,
) -> FastAPI:
    """Create the FastAPI app. Secrets come from Vault unless a service is passed in."""
    if auth_service is None:
        config = config or AuthConfig(secret=get_auth_secret())
        auth_service = build_auth_service(config)
    config = auth_service.config

    mount = config.auth_base_path.strip("/")

    app = FastAPI(title="passwordless")
    app.include_router(create_auth_router(auth_service), prefix=f"/{mount}" if mount else "")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info(f"Auth routes mounted at {config.auth_url}")
    return app
