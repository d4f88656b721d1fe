"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)
        else:
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool = False

    # Keycloak admin API
    keycloak_url: str = ""
    keycloak_realm: str = "demo"
    keycloak_auth_realm: str = "demo"
    keycloak_timeout: float = 5.0

    # Bearer token validation
    keycloak_issuer: str = ""
    keycloak_server_url: str = ""

    # Service account (preferred) or admin credentials
    keycloak_service_client_id: str = "backend-resources"
    keycloak_service_client_secret: str = ""
    keycloak_admin: str = ""
    keycloak_admin_password: str = ""

    # Roles
    moderator_role: str = "MODERATOR"
    hello_required_role: str = "MODERATOR"

    # Logging
    log_level: str = "INFO"

    @property
    def uses_service_account(self) -> bool:
        return bool(self.keycloak_service_client_secret)


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        logger.info("[demo-mode] Using default for %s", var_name)
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _float_env(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {raw!r}")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    keycloak_url = _get_or_generate(
        "KEYCLOAK_URL",
        demo_default="http://127.0.0.1:8080",
        demo_mode=demo_mode,
    ).rstrip("/")
    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "demo")
    keycloak_auth_realm = os.environ.get("KEYCLOAK_AUTH_REALM", keycloak_realm)

    keycloak_issuer = _get_or_generate(
        "KEYCLOAK_ISSUER",
        demo_default=f"{keycloak_url}/realms/{keycloak_realm}",
        demo_mode=demo_mode,
    )
    keycloak_server_url = os.environ.get("KEYCLOAK_SERVER_URL", f"{keycloak_url}/realms/{keycloak_realm}")

    keycloak_service_client_id = os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "backend-resources")
    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET",
    ) or ""
    keycloak_admin = os.environ.get("KEYCLOAK_ADMIN", "")
    keycloak_admin_password = _load_secret_from_file(
        "keycloak_admin_password",
        "KEYCLOAK_ADMIN_PASSWORD",
    ) or ""

    if not keycloak_service_client_secret and not (keycloak_admin and keycloak_admin_password):
        if demo_mode:
            keycloak_service_client_secret = "demo-service-secret"
            logger.info("[demo-mode] Using default service client secret")
        else:
            raise RuntimeError(
                "KEYCLOAK_SERVICE_CLIENT_SECRET (or KEYCLOAK_ADMIN/KEYCLOAK_ADMIN_PASSWORD) "
                "is required when DEMO_MODE is false."
            )

    moderator_role = os.environ.get("MODERATOR_ROLE", "MODERATOR").strip()
    # Empty value admits any authenticated caller
    hello_required_role = os.environ.get("HELLO_REQUIRED_ROLE", moderator_role).strip()

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info("Mode=%s; realm=%s; keycloak=%s", mode_label, keycloak_realm, keycloak_url)
    if demo_mode:
        logger.warning("Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_auth_realm=keycloak_auth_realm,
        keycloak_timeout=_float_env("KEYCLOAK_TIMEOUT", 5.0),
        keycloak_issuer=keycloak_issuer,
        keycloak_server_url=keycloak_server_url,
        keycloak_service_client_id=keycloak_service_client_id,
        keycloak_service_client_secret=keycloak_service_client_secret,
        keycloak_admin=keycloak_admin,
        keycloak_admin_password=keycloak_admin_password,
        moderator_role=moderator_role,
        hello_required_role=hello_required_role,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
