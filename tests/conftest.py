"""Shared pytest fixtures for the hostal panel tests."""
import sys
sys.dont_write_bytecode = True

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from .helpers import (  # noqa: E402
    TEST_AUDIENCE,
    TEST_ISSUER,
    InMemoryStore,
    _create_jwks,
    _create_token,
    _generate_rsa_keypair,
    memory_scope,
)


@pytest.fixture(autouse=True)
def _reset_oidc_jwks_cache():
    """Reset global JWKS cache to avoid cross-test contamination.

    The OIDC JWKS cache is a module-level global that persists between tests.
    Without this reset, a JWKS cached by one test would not match the keys
    generated for the next one.
    """
    import hostal.api.auth as auth_module

    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0
    yield
    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0


@pytest.fixture(scope="session")
def rsa_keypair():
    """RSA key pair shared by the whole session (generation is slow)."""
    return _generate_rsa_keypair()


@pytest.fixture
def jwks(rsa_keypair):
    _, public_key = rsa_keypair
    return _create_jwks(public_key)


@pytest.fixture
def oidc_env():
    return {
        "OIDC_ISSUER": TEST_ISSUER,
        "OIDC_AUDIENCE": TEST_AUDIENCE,
        "OIDC_JWKS_URL": f"{TEST_ISSUER}/.well-known/jwks.json",
    }


@pytest.fixture
def mock_jwks_fetch(jwks):
    with patch("hostal.api.auth._fetch_jwks", return_value=jwks) as mock:
        yield mock


@pytest.fixture
def staff_role():
    """Role of the signed-in user; override with parametrize."""
    return "recepcion"


@pytest.fixture
def mock_db_user(staff_role):
    """Resolve subject user-123 to an active staff member with staff_role."""

    def mock_get_user(external_subject: str):
        from hostal.api.auth import CurrentUser

        if external_subject == "user-123":
            return CurrentUser(
                id=1,
                external_subject="user-123",
                email="staff@example.com",
                name="Test Staff",
                role=staff_role,
            )
        return None

    with patch("hostal.api.auth._get_user_from_db", side_effect=mock_get_user) as mock:
        yield mock


@pytest.fixture
def auth_headers(rsa_keypair):
    private_key, _ = rsa_keypair
    return {"Authorization": f"Bearer {_create_token(private_key)}"}


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def app(oidc_env, mock_jwks_fetch, mock_db_user, store):
    """App with auth mocked and the record store kept in memory."""
    from hostal.api.deps import get_store_scope
    from hostal.api.factory import create_app

    with patch.dict("os.environ", oidc_env):
        app = create_app()
        app.dependency_overrides[get_store_scope] = lambda: memory_scope(store)
        yield app


@pytest.fixture
def client(app):
    return TestClient(app)
