"""Identity-provider gateway: the three Keycloak operations the façade needs.

Each operation returns a ``Result``. Keycloak and transport exceptions are
caught here and turned into ``RemoteFailure`` values carrying the remote status
and message unchanged; mapping to client-facing errors happens in
``user_management``.
"""
from __future__ import annotations
import logging

import requests

from backend_resources.core.errors import RemoteFailure, Result
from backend_resources.core.keycloak import (
    KeycloakAPIError,
    KeycloakAuthenticationError,
    KeycloakClient,
    UnexpectedResponseError,
    UserNotFoundError,
    UserService,
    extract_error_message,
)
from backend_resources.core.models import UserRequest

logger = logging.getLogger(__name__)


def user_id_from_location(location: str | None) -> str | None:
    """Return the last path segment of a created-resource location."""
    if not location:
        return None
    segment = location.rstrip("/").rsplit("/", 1)[-1]
    return segment or None


class IdentityProviderGateway:
    """Adapter over the Keycloak admin API for one realm."""

    def __init__(self, client: KeycloakClient, realm: str):
        self.client = client
        self.realm = realm
        self.users = UserService(client)

    def create_user(self, request: UserRequest) -> Result[str]:
        try:
            resp = self.users.create_user(
                self.realm,
                request.username,
                request.email,
                request.first_name,
                request.last_name,
                request.password,
            )
        except KeycloakAPIError as exc:
            return Result.failure(RemoteFailure(exc.message, exc.status_code))
        except (KeycloakAuthenticationError, requests.RequestException) as exc:
            return Result.failure(self._transport_failure("create user", exc))

        if resp.status_code != 201:
            message = extract_error_message(resp) or f"Create method returned status {resp.status_code}"
            return Result.failure(RemoteFailure(message, resp.status_code))

        user_id = user_id_from_location(resp.headers.get("Location"))
        if not user_id:
            return Result.failure(RemoteFailure("Created response carries no user location"))

        return Result.success(user_id)

    def fetch_profile(self, user_id: str) -> Result[dict]:
        try:
            rep = self.users.get_user(self.realm, user_id)
        except UserNotFoundError as exc:
            return Result.failure(RemoteFailure(str(exc), 404, not_found=True))
        except KeycloakAPIError as exc:
            return Result.failure(RemoteFailure(exc.message, exc.status_code))
        except (KeycloakAuthenticationError, UnexpectedResponseError, requests.RequestException) as exc:
            return Result.failure(self._transport_failure("fetch user", exc))

        return Result.success({
            "id": rep.get("id") or user_id,
            "firstName": rep.get("firstName"),
            "lastName": rep.get("lastName"),
            "email": rep.get("email"),
        })

    def fetch_roles_and_groups(self, user_id: str) -> Result[tuple[list[str], list[str]]]:
        try:
            roles = self.users.get_realm_role_mappings(self.realm, user_id)
            groups = self.users.get_groups(self.realm, user_id)
        except KeycloakAPIError as exc:
            return Result.failure(RemoteFailure(exc.message, exc.status_code))
        except (KeycloakAuthenticationError, UnexpectedResponseError, requests.RequestException) as exc:
            return Result.failure(self._transport_failure("fetch roles and groups", exc))

        return Result.success((
            _names(roles),
            _names(groups),
        ))

    def is_reachable(self) -> bool:
        return self.client.ping_realm(self.realm)

    def _transport_failure(self, action: str, exc: Exception) -> RemoteFailure:
        # Token and connection problems are ours, never the caller's
        logger.error("Keycloak unavailable during %s: %s", action, exc)
        return RemoteFailure(f"Identity provider unavailable: {action} failed")


def _names(representations: list) -> list[str]:
    """Names of role or group representations, in remote order."""
    return [
        item["name"]
        for item in representations
        if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"]
    ]
