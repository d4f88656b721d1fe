"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with blueprints, error handlers, and the Keycloak
gateway. ``backend_resources.wsgi`` holds the instance served by gunicorn.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from backend_resources.config import AppConfig, load_settings
from backend_resources.core.gateway import IdentityProviderGateway
from backend_resources.core.keycloak import KeycloakClient
from backend_resources.core.user_management import UserAggregationService

JSON_MAX_SIZE_BYTES = 65536  # 64 KB

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(config: Optional[AppConfig] = None, gateway=None) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Settings to use (defaults to load_settings())
        gateway: Identity-provider gateway (defaults to one built from config)
    """
    cfg = config or load_settings()
    _configure_logging(cfg.log_level)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = JSON_MAX_SIZE_BYTES

    gateway = gateway or build_gateway(cfg)
    app.config["IDP_GATEWAY"] = gateway
    app.config["USER_SERVICE"] = UserAggregationService(gateway)

    # Trust X-Forwarded-* headers from the reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    from backend_resources.api import errors, health, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp, url_prefix="/api/users")

    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    logger.info("Mode=%s; user API registered at /api/users (realm=%s)", mode_label, cfg.keycloak_realm)

    return app


def build_gateway(cfg: AppConfig) -> IdentityProviderGateway:
    """Create the Keycloak client for the configured credentials."""
    client = KeycloakClient(cfg.keycloak_url, timeout=cfg.keycloak_timeout)
    if cfg.uses_service_account:
        client.use_service_account(
            cfg.keycloak_auth_realm,
            cfg.keycloak_service_client_id,
            cfg.keycloak_service_client_secret,
        )
    else:
        client.use_admin(cfg.keycloak_admin, cfg.keycloak_admin_password, cfg.keycloak_auth_realm)
    return IdentityProviderGateway(client, cfg.keycloak_realm)


def _configure_logging(level: str) -> None:
    """Install a root handler once; gunicorn may already have done so."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
