"""Shared test fixtures for the directory test suite."""

import itertools
from pathlib import Path
from unittest.mock import Mock, patch

import fakeredis
import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env")

# Reset vault client singleton so no test reuses a cached secret
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from fastapi import FastAPI
from starlette.testclient import TestClient

from api.contacts import create_contacts_router
from api.errors import register_error_handlers
from api.groups import create_groups_router
from api.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from auth.api import create_auth_router
from auth.authorization import AccessPolicy, AuthorizationGate
from auth.config import AuthConfig
from auth.csrf import CSRFMiddleware
from auth.database import AuthDatabase
from auth.dependencies import AdminRequired
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.session import SessionManager
from auth.types import User
from clients.valkey_client import ValkeyClient
from core.services.contact_service import ContactService
from core.services.group_service import GroupService
from system.api import create_system_router
from system.service import SystemService
from utils.timezone import now_utc
from tests.helpers import BOT_TOKEN, sign_claim


# =============================================================================
# CONFIG FIXTURES
# =============================================================================


@pytest.fixture
def config():
    """Default auth config; cookies not Secure so TestClient sends them over http."""
    return AuthConfig(cookie_secure=False)


@pytest.fixture
def bot_token() -> str:
    return BOT_TOKEN


# =============================================================================
# VALKEY FIXTURES
# =============================================================================


@pytest.fixture
def fake_redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def valkey(fake_redis_server):
    """ValkeyClient backed by an in-process fakeredis server."""
    def from_url(url, **kwargs):
        return fakeredis.FakeRedis(server=fake_redis_server, **kwargs)

    with patch("clients.valkey_client.redis.from_url", side_effect=from_url):
        client = ValkeyClient("redis://fake:6379/0")
    yield client
    client.close()


# =============================================================================
# USER STORE FIXTURES
# =============================================================================


@pytest.fixture
def users():
    """
    AuthDatabase mock backed by a dict.

    Behaves like the users table: ids are assigned on create, telegram_id
    is unique, is_active flips in place.
    """
    store: dict[int, User] = {}
    ids = itertools.count(1)
    mock = Mock(spec=AuthDatabase)

    def get_user_by_id(user_id):
        return store.get(user_id)

    def get_user_by_telegram_id(telegram_id):
        return next((u for u in store.values() if u.telegram_id == telegram_id), None)

    def create_user(telegram_id, contact_id=None):
        user = User(
            id=next(ids),
            telegram_id=telegram_id,
            contact_id=contact_id,
            created_at=now_utc(),
        )
        store[user.id] = user
        return user

    def set_active(user_id, active):
        if user_id not in store:
            return False
        store[user_id] = store[user_id].model_copy(update={"is_active": active})
        return True

    mock.get_user_by_id.side_effect = get_user_by_id
    mock.get_user_by_telegram_id.side_effect = get_user_by_telegram_id
    mock.create_user.side_effect = create_user
    mock.deactivate_user.side_effect = lambda user_id: set_active(user_id, False)
    mock.activate_user.side_effect = lambda user_id: set_active(user_id, True)
    mock.store = store
    return mock


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def contacts():
    """
    ContactService mock. Tests register contacts in `contacts.by_telegram_id`.
    """
    mock = Mock(spec=ContactService)
    mock.by_telegram_id = {}
    mock.get_by_telegram_id.side_effect = lambda telegram_id: mock.by_telegram_id.get(telegram_id)
    return mock


@pytest.fixture
def groups():
    return Mock(spec=GroupService)


@pytest.fixture
def system_service():
    """Persisted debug mode off unless a test flips it."""
    mock = Mock(spec=SystemService)
    mock.get_debug_mode.return_value = False
    return mock


@pytest.fixture
def security_logger():
    return Mock(spec=SecurityLogger)


@pytest.fixture
def session_manager(valkey, config, users):
    """Real SessionManager over fakeredis."""
    return SessionManager(valkey, config, users)


@pytest.fixture
def policy(users, contacts, system_service, config):
    gate = AuthorizationGate(users, contacts, config.admin_group_name)
    return AccessPolicy(gate, system_service, config)


@pytest.fixture
def auth_service(config, bot_token, users, session_manager, contacts, policy, security_logger):
    return AuthService(
        config=config,
        bot_token=bot_token,
        auth_db=users,
        session_manager=session_manager,
        contacts=contacts,
        policy=policy,
        security_logger=security_logger,
    )


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(config, session_manager, auth_service, policy, contacts, groups, system_service, security_logger):
    """Full HTTP stack: middleware, error handlers and every router."""
    admin = AdminRequired(policy, security_logger)

    app = FastAPI()
    register_error_handlers(app)
    app.add_middleware(AuthMiddleware, session_manager=session_manager)
    app.add_middleware(
        CSRFMiddleware,
        exempt_paths=config.csrf_exempt_paths,
        security_logger=security_logger,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(
        create_auth_router(auth_service, admin, cookie_secure=config.cookie_secure),
        prefix="/api/v1/auth",
    )
    app.include_router(
        create_system_router(system_service, policy, admin, security_logger,
                             force_debug_mode=config.force_debug_mode),
        prefix="/api/v1/system",
    )
    app.include_router(create_contacts_router(contacts, admin), prefix="/api/v1")
    app.include_router(create_groups_router(groups, admin), prefix="/api/v1")
    return app


@pytest.fixture
def client(app):
    """Anonymous test client."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def login(client):
    """Log in through the real endpoint; returns (session_token, csrf_token)."""
    def _login(**claim_fields):
        claim = sign_claim(**claim_fields)
        response = client.post("/api/v1/auth/telegram", json=claim.model_dump())
        assert response.status_code == 200, response.text
        token = response.json()["data"]["session_token"]
        csrf = client.get("/api/v1/auth/csrf-token").json()["data"]["csrf_token"]
        return token, csrf
    return _login
