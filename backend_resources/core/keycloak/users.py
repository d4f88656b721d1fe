"""Keycloak user operations used by the user-management façade."""
from __future__ import annotations
import logging
from typing import List

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, UnexpectedResponseError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """Service for reading and creating Keycloak users."""

    def __init__(self, client: KeycloakClient):
        """Initialize user service.

        Args:
            client: Keycloak client with credentials configured
        """
        self.client = client

    def create_user(
        self,
        realm: str,
        username: str,
        email: str,
        first: str,
        last: str,
        password: str,
    ):
        """Submit a new enabled user with a permanent password.

        Returns:
            The raw response; callers inspect status and Location header.
        """
        payload = {
            "username": username,
            "email": email,
            "firstName": first,
            "lastName": last,
            "enabled": True,
            "credentials": [
                {"type": "password", "value": password, "temporary": False},
            ],
        }
        return self.client.post(f"/admin/realms/{realm}/users", json=payload)

    def get_user(self, realm: str, user_id: str) -> dict:
        """Return the user representation for an id.

        Raises:
            UserNotFoundError: If Keycloak answers 404
        """
        try:
            resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}")
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(user_id, exc.message) from exc
            raise
        return _json_body(resp, dict, "a user representation")

    def get_realm_role_mappings(self, realm: str, user_id: str) -> List[dict]:
        """Return realm-level role representations mapped to the user."""
        resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}/role-mappings")
        mappings = _json_body(resp, dict, "a role mappings object")
        realm_mappings = mappings.get("realmMappings") or []
        if not isinstance(realm_mappings, list):
            raise UnexpectedResponseError(resp.url, "a list of realm mappings")
        return realm_mappings

    def get_groups(self, realm: str, user_id: str) -> List[dict]:
        """Return group representations the user is a member of."""
        resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}/groups")
        return _json_body(resp, list, "a list of groups")


def _json_body(resp, expected_type: type, description: str):
    """Decode a response body, insisting on the JSON type the endpoint documents."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if not isinstance(body, expected_type):
        raise UnexpectedResponseError(resp.url, description)
    return body
