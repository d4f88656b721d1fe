"""
Bearer token authentication for the user API.

Validates JWT access tokens issued by Keycloak (RFC 6750 / RFC 7519) and
exposes the caller identity to route handlers. Authorization by role is an
explicit guard call in each handler (see ``guard``).

Security:
- RSA-SHA256 signature verification via JWKS (RFC 7517)
- Expiration, not-before and issuer validation
- JWKS caching (1-hour refresh)
"""

import logging
from typing import Optional, Dict

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    ExpiredSignatureError,
    InvalidIssuerError,
    InvalidSignatureError,
    DecodeError,
    PyJWTError,
)
from flask import request, current_app, abort

from backend_resources.core.errors import AuthorizationDenied
from backend_resources.core.models import CallerIdentity
from backend_resources.core.rbac import caller_from_claims, require_role

logger = logging.getLogger(__name__)

# Global JWKS client (cached singleton)
_jwks_client: Optional[PyJWKClient] = None


class TokenValidationError(Exception):
    """Exception raised when JWT token validation fails."""
    pass


def get_jwks_client() -> PyJWKClient:
    """
    Get cached JWKS client for the configured realm.

    Returns:
        PyJWKClient: Configured client for Keycloak realm certs endpoint
    """
    global _jwks_client

    if _jwks_client is None:
        cfg = current_app.config["APP_CONFIG"]
        jwks_url = f"{cfg.keycloak_server_url}/protocol/openid-connect/certs"

        logger.info("Initializing JWKS client for: %s", jwks_url)

        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
            lifespan=3600,
            headers={"User-Agent": "backend-resources/1.0"},
        )

    return _jwks_client


def validate_jwt_token(token: str) -> Dict[str, object]:
    """
    Validate a JWT Bearer token.

    Args:
        token: JWT token string (without "Bearer " prefix)

    Returns:
        dict: Validated token claims

    Raises:
        TokenValidationError: If any validation fails
    """
    cfg = current_app.config["APP_CONFIG"]

    try:
        signing_key = get_jwks_client().get_signing_key_from_jwt(token)
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=cfg.keycloak_issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_nbf": True,
                "verify_iss": True,
                "verify_aud": False,
                "require": ["exp", "iat"],
            },
            leeway=5,
        )
    except ExpiredSignatureError:
        raise TokenValidationError("Token expired (exp claim)")
    except InvalidIssuerError as e:
        raise TokenValidationError(f"Invalid issuer: {e}")
    except InvalidSignatureError:
        raise TokenValidationError("Invalid signature")
    except DecodeError as e:
        raise TokenValidationError(f"Token decode error (malformed JWT): {e}")
    except PyJWTError as e:
        raise TokenValidationError(f"Token validation failed: {e}")

    logger.debug("JWT validated for subject: %s", claims.get("sub"))
    return claims


def authenticate_request() -> CallerIdentity:
    """Validate the request's bearer token and return the caller.

    Aborts with 401 when the header is missing, malformed or the token is invalid.
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
        logger.warning("Request to %s without bearer token", request.path)
        abort(401, description="Bearer token required")

    try:
        claims = validate_jwt_token(auth_header[7:].strip())
    except TokenValidationError as e:
        logger.warning("JWT validation failed: %s", e)
        abort(401, description=str(e))

    return caller_from_claims(claims)


def guard(required_role: Optional[str]) -> CallerIdentity:
    """Authenticate the request, then require a role.

    Raises:
        AuthorizationDenied: Caller lacks the role (rendered as 403)
    """
    caller = authenticate_request()
    try:
        require_role(caller.roles, required_role)
    except AuthorizationDenied:
        logger.warning("Caller '%s' denied: requires role %s", caller.username, required_role)
        raise
    return caller
