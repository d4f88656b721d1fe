"""User-management façade over the identity provider.

Architecture:
    api/users.py -> UserAggregationService -> IdentityProviderGateway -> Keycloak

Every operation returns a ``Result``. Validation runs before any remote call,
gateway failures are mapped once here into the error taxonomy, and the
profile aggregation is all-or-nothing: the first failing lookup aborts it.
"""
from __future__ import annotations
import logging
import uuid
from typing import Any, Mapping

from backend_resources.core.errors import (
    BackendOperationError,
    RemoteFailure,
    Result,
    ValidationError,
    map_remote_status,
)
from backend_resources.core.models import CallerIdentity, UserProfile, UserRequest
from backend_resources.core.validators import validate_user_request

logger = logging.getLogger(__name__)

INVALID_USER_ID = "Invalid user id"


def canonical_user_id(user_id: str) -> str | None:
    """Return the lowercase hyphenated form of a UUID, or None.

    Braced, URN and hyphen-less spellings are rejected rather than rewritten.
    """
    raw = str(user_id)
    try:
        parsed = uuid.UUID(raw)
    except ValueError:
        return None
    canonical = str(parsed)
    return canonical if canonical == raw.lower() else None


def to_backend_error(failure: RemoteFailure, fallback_message: str) -> BackendOperationError:
    """Translate a gateway failure into the client-facing error."""
    status = 404 if failure.not_found else map_remote_status(failure.status)
    return BackendOperationError(failure.message or fallback_message, status)


class UserAggregationService:
    """Create users and assemble user profiles through the gateway."""

    def __init__(self, gateway):
        self.gateway = gateway

    def create_user(self, payload: Mapping[str, Any]) -> Result[str]:
        violations = validate_user_request(payload)
        if violations:
            logger.info("Rejected user creation: invalid fields %s", sorted(violations))
            return Result.failure(ValidationError(violations))

        request = UserRequest.from_payload(payload)
        created = self.gateway.create_user(request)
        if not created.ok:
            error = to_backend_error(created.error, "User creation failed")
            logger.warning(
                "User creation for '%s' failed: status=%s message=%s",
                request.username, error.status, error.message,
            )
            return Result.failure(error)

        logger.info("Created user '%s' (id=%s)", request.username, created.value)
        return Result.success(created.value)

    def get_user_by_id(self, user_id: str) -> Result[UserProfile]:
        user_id = canonical_user_id(user_id)
        if user_id is None:
            return Result.failure(ValidationError({"id": INVALID_USER_ID}))

        profile = self.gateway.fetch_profile(user_id)
        if not profile.ok:
            return Result.failure(self._lookup_failed(user_id, profile.error))

        memberships = self.gateway.fetch_roles_and_groups(user_id)
        if not memberships.ok:
            return Result.failure(self._lookup_failed(user_id, memberships.error))

        fields = profile.value
        roles, groups = memberships.value
        return Result.success(UserProfile(
            id=fields["id"],
            first_name=fields.get("firstName"),
            last_name=fields.get("lastName"),
            email=fields.get("email"),
            roles=list(roles),
            groups=list(groups),
        ))

    def get_current_user_name(self, caller: CallerIdentity) -> str:
        return caller.username

    def _lookup_failed(self, user_id: str, failure: RemoteFailure) -> BackendOperationError:
        error = to_backend_error(failure, "User lookup failed")
        logger.warning("Lookup of user %s failed: status=%s message=%s", user_id, error.status, error.message)
        return error
