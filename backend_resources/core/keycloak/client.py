"""Low-level HTTP client for Keycloak Admin API.

Handles authentication, token management, and HTTP operations.
"""
from __future__ import annotations
import logging
import os
import threading
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timedelta

import requests

from .exceptions import KeycloakAPIError, KeycloakAuthenticationError

REQUEST_TIMEOUT = 5

# Refresh this long before the advertised expiry
TOKEN_REFRESH_LEEWAY = timedelta(seconds=10)

logger = logging.getLogger(__name__)


class KeycloakClient:
    """HTTP client for Keycloak Admin API with automatic token management.

    Features:
    - Lazy token acquisition on first request
    - Automatic token refresh when expired
    - Centralized error handling
    - Support for both admin and service account authentication

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        client.use_service_account("master", "backend-resources", "secret")
        response = client.get("/admin/realms/demo/users/<id>")
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = REQUEST_TIMEOUT):
        """Initialize Keycloak client.

        Args:
            base_url: Keycloak base URL (defaults to KEYCLOAK_URL env var)
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or os.environ.get("KEYCLOAK_URL", "http://keycloak:8080")).rstrip("/")
        self.timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        # (realm, form data) posted to the token endpoint
        self._grant: Optional[Tuple[str, Dict[str, str]]] = None
        self._lock = threading.Lock()

    def use_admin(self, username: str, password: str, realm: str = "master") -> None:
        """Authenticate as an admin user (password grant against admin-cli)."""
        self._set_grant(realm, {
            "grant_type": "password",
            "client_id": "admin-cli",
            "username": username,
            "password": password,
        })

    def use_service_account(self, auth_realm: str, client_id: str, client_secret: str) -> None:
        """Authenticate as a service account (client credentials grant)."""
        self._set_grant(auth_realm, {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        })

    def _set_grant(self, realm: str, form: Dict[str, str]) -> None:
        with self._lock:
            self._grant = (realm, form)
            self._token = None
            self._token_expires_at = None

    def _ensure_authenticated(self) -> str:
        """Return a valid token, fetching or refreshing it if necessary."""
        with self._lock:
            if self._token and self._token_expires_at and datetime.now() < self._token_expires_at - TOKEN_REFRESH_LEEWAY:
                return self._token

            if self._grant is None:
                raise KeycloakAuthenticationError(
                    401, "No credentials configured - call use_admin or use_service_account first"
                )

            realm, form = self._grant
            payload = self._token_request(realm, form)
            self._token = payload["access_token"]
            expires_in = int(payload.get("expires_in") or 60)
            self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
            logger.debug("Obtained Keycloak %s token (expires in %ss)", form["grant_type"], expires_in)
            return self._token

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        token = self._ensure_authenticated()
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {token}"

        resp = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with automatic authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        return self._request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        """Execute POST request with automatic authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        return self._request("POST", path, json=json, **kwargs)

    def ping_realm(self, realm: str) -> bool:
        """Return True when the realm's public endpoint answers."""
        try:
            resp = requests.get(f"{self.base_url}/realms/{realm}", timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Keycloak realm '%s' unreachable: %s", realm, exc)
            return False
        return resp.status_code == 200

    def _token_request(self, realm: str, data: dict) -> dict:
        url = f"{self.base_url}/realms/{realm}/protocol/openid-connect/token"
        resp = requests.post(url, data=data, timeout=self.timeout)
        if resp.status_code != 200:
            raise KeycloakAuthenticationError(resp.status_code, extract_error_message(resp))
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise KeycloakAuthenticationError(resp.status_code, "Token response carries no access_token")
        return payload

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            KeycloakAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise KeycloakAPIError(resp.status_code, extract_error_message(resp), resp.url)


def extract_error_message(resp: requests.Response) -> str:
    """Pull the human-readable message out of a Keycloak error response.

    Keycloak answers admin errors with ``{"errorMessage": ...}`` and token
    errors with ``{"error": ..., "error_description": ...}``; anything else
    is returned as raw text.
    """
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("errorMessage", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    return (resp.text or "").strip()
