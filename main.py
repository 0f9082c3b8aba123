"""
FastAPI application entry point for the RIM corporate directory.

Run with:  uvicorn asgi:app

Middleware stack (outermost to innermost):
  1. RequestIDMiddleware        -- X-Request-ID on every response
  2. SecurityHeadersMiddleware  -- browser hardening headers
  3. CORSMiddleware             -- allowed browser origins, with credentials
  4. CSRFMiddleware             -- X-CSRF-Token on state-changing requests
  5. AuthMiddleware             -- resolves the session into request.state.user

Secrets (database URL, Valkey URL, bot token) come from Vault; everything
else from the environment (optionally a .env file).
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from api.base import error_response, success_response, ErrorCodes
from api.contacts import create_contacts_router
from api.errors import register_error_handlers
from api.groups import create_groups_router
from api.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from auth.api import create_auth_router
from auth.authorization import AccessPolicy, AuthorizationGate
from auth.config import AuthConfig
from auth.csrf import CSRF_HEADER, CSRFMiddleware
from auth.database import AuthDatabase
from auth.dependencies import AdminRequired
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.session import SessionManager
from clients import (
    PostgresClient,
    ValkeyClient,
    get_database_url,
    get_telegram_bot_token,
    get_valkey_url,
)
from core.services.contact_service import ContactService
from core.services.group_service import GroupService
from system.api import create_system_router
from system.database import SettingsDatabase
from system.service import SystemService

API_PREFIX = "/api/v1"

logger = logging.getLogger("rim.api")


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(
    config: AuthConfig,
    postgres: PostgresClient,
    valkey: ValkeyClient,
    bot_token: str,
) -> FastAPI:
    """Wire services, routers and middleware around the given clients."""
    auth_db = AuthDatabase(postgres)
    security_logger = SecurityLogger(postgres)
    groups = GroupService(postgres)
    contacts = ContactService(postgres, groups)
    system_service = SystemService(SettingsDatabase(postgres))

    session_manager = SessionManager(valkey, config, auth_db)
    gate = AuthorizationGate(auth_db, contacts, config.admin_group_name)
    policy = AccessPolicy(gate, system_service, config)
    admin = AdminRequired(policy, security_logger)
    auth_service = AuthService(
        config=config,
        bot_token=bot_token,
        auth_db=auth_db,
        session_manager=session_manager,
        contacts=contacts,
        policy=policy,
        security_logger=security_logger,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("RIM directory starting up")
        if config.force_debug_mode:
            logger.warning(
                "DEBUG_MODE is set: every authenticated user has admin rights. "
                "Never run like this in production."
            )
        system_service.ensure_defaults()
        yield
        logger.info("RIM directory shutting down")
        valkey.close()
        postgres.close()

    app = FastAPI(title="RIM Directory", lifespan=lifespan)
    app.state.auth_service = auth_service
    app.state.access_policy = policy

    register_error_handlers(app)

    app.add_middleware(AuthMiddleware, session_manager=session_manager)
    app.add_middleware(
        CSRFMiddleware,
        exempt_paths=config.csrf_exempt_paths,
        security_logger=security_logger,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", CSRF_HEADER],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(
        create_auth_router(auth_service, admin, cookie_secure=config.cookie_secure),
        prefix=f"{API_PREFIX}/auth",
    )
    app.include_router(
        create_system_router(
            system_service,
            policy,
            admin,
            security_logger,
            force_debug_mode=config.force_debug_mode,
        ),
        prefix=f"{API_PREFIX}/system",
    )
    app.include_router(create_contacts_router(contacts, admin), prefix=API_PREFIX)
    app.include_router(create_groups_router(groups, admin), prefix=API_PREFIX)

    @app.get("/health")
    async def health():
        """Liveness plus store reachability."""
        checks = {}
        for name, client in (("valkey", valkey), ("postgres", postgres)):
            try:
                checks[name] = client.ping()
            except Exception:
                logger.error("Health check failed for %s", name, exc_info=True)
                checks[name] = False
        if all(checks.values()):
            return success_response({"status": "ok", **checks}).model_dump(mode="json")
        return JSONResponse(
            status_code=503,
            content=error_response(
                ErrorCodes.SERVICE_UNAVAILABLE,
                "Dependency check failed: " + ", ".join(k for k, ok in checks.items() if not ok),
            ).model_dump(mode="json"),
        )

    return app


def build_app() -> FastAPI:
    """Production wiring: env, logging, Vault secrets, real clients."""
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return create_app(
        config=AuthConfig.from_env(),
        postgres=PostgresClient(get_database_url()),
        valkey=ValkeyClient(get_valkey_url()),
        bot_token=get_telegram_bot_token(),
    )

