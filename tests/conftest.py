"""Pytest shared fixtures."""
import pathlib
import sys
import time
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization
from authlib.jose import jwt as authlib_jwt

from backend_resources.api import security
from backend_resources.config import AppConfig
from backend_resources.core.errors import Result
from backend_resources.flask_app import create_app

ISSUER = "https://localhost/realms/demo"
USER_ID = "550e8400-e29b-41d4-a716-446655440000"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching Keycloak.

    Tests that exercise the HTTP client install their own stubs on top.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(*args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {args} {kwargs.get('url', '')}")

    monkeypatch.setattr(requests, "post", _refuse)
    monkeypatch.setattr(requests, "get", _refuse)
    monkeypatch.setattr(requests, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# Gateway Double
# ─────────────────────────────────────────────────────────────────────────────
class FakeGateway:
    """In-memory stand-in for IdentityProviderGateway recording each call."""

    def __init__(self):
        self.create_result = Result.success(USER_ID)
        self.profile_result = Result.success({
            "id": USER_ID,
            "firstName": "tmp",
            "lastName": "tmp_lastName",
            "email": "tmp@example.com",
        })
        self.memberships_result = Result.success((["MODERATOR", "offline_access"], ["staff", "moderators"]))
        self.reachable = True
        self.calls = []

    def create_user(self, request):
        self.calls.append(("create_user", request))
        return self.create_result

    def fetch_profile(self, user_id):
        self.calls.append(("fetch_profile", user_id))
        return self.profile_result

    def fetch_roles_and_groups(self, user_id):
        self.calls.append(("fetch_roles_and_groups", user_id))
        return self.memberships_result

    def is_reachable(self):
        return self.reachable

    @property
    def call_names(self):
        return [name for name, _ in self.calls]


@pytest.fixture()
def fake_gateway():
    return FakeGateway()


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for JWT Testing
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """Generate RSA key pair for JWT signing in tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )

    return {
        "private_key": private_key,
        "private_pem": private_pem,
        "public_key": private_key.public_key(),
    }


def create_valid_jwt(
    rsa_key_pair: dict,
    issuer: str = ISSUER,
    username: str = "tmp",
    roles: Optional[list[str]] = None,
    exp_offset: int = 3600,
    kid: str = "default-key-id",
) -> str:
    """Create an RS256-signed JWT shaped like a Keycloak access token."""
    if roles is None:
        roles = ["MODERATOR"]

    now = int(time.time())
    header = {"alg": "RS256", "typ": "JWT", "kid": kid}
    payload = {
        "iss": issuer,
        "sub": f"{username}-subject",
        "exp": now + exp_offset,
        "nbf": now - 1,
        "iat": now,
        "preferred_username": username,
        "realm_access": {"roles": roles},
    }

    token = authlib_jwt.encode(header, payload, rsa_key_pair["private_pem"])
    return token.decode("utf-8") if isinstance(token, bytes) else token


@pytest.fixture()
def stub_jwks(monkeypatch, rsa_key_pair):
    """Serve the test public key instead of fetching the realm JWKS."""

    class _SigningKey:
        key = rsa_key_pair["public_key"]

    class _JWKSClient:
        def get_signing_key_from_jwt(self, token):
            return _SigningKey()

    monkeypatch.setattr(security, "_jwks_client", None)
    monkeypatch.setattr(security, "get_jwks_client", lambda: _JWKSClient())


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def app_config():
    return AppConfig(
        demo_mode=False,
        keycloak_url="https://localhost",
        keycloak_realm="demo",
        keycloak_auth_realm="demo",
        keycloak_issuer=ISSUER,
        keycloak_server_url=ISSUER,
        keycloak_service_client_secret="test-secret",
    )


@pytest.fixture()
def flask_app(app_config, fake_gateway, stub_jwks):
    app = create_app(app_config, gateway=fake_gateway)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(flask_app):
    with flask_app.test_client() as client:
        yield client


@pytest.fixture()
def auth_headers(rsa_key_pair):
    """Build an Authorization header for a caller with the given roles."""

    def _headers(roles: Optional[list[str]] = None, username: str = "tmp") -> dict:
        token = create_valid_jwt(rsa_key_pair, username=username, roles=roles)
        return {"Authorization": f"Bearer {token}"}

    return _headers
