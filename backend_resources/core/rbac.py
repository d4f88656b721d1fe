"""Role-Based Access Control helpers."""
from __future__ import annotations
from typing import Iterable, Optional

from backend_resources.core.errors import AuthorizationDenied
from backend_resources.core.models import CallerIdentity

# Spring Security stores granted roles as ROLE_<name>
ROLE_PREFIX = "role_"


def collect_roles(*sources) -> list[str]:
    """Collect all roles from realm_access and resource_access token claims."""
    roles = []
    for source in sources:
        if not isinstance(source, dict):
            continue
        realm_access = source.get("realm_access")
        if isinstance(realm_access, dict):
            roles.extend(r for r in realm_access.get("roles", []) if r not in roles)
        resource_access = source.get("resource_access")
        if isinstance(resource_access, dict):
            for client_access in resource_access.values():
                if not isinstance(client_access, dict):
                    continue
                roles.extend(r for r in client_access.get("roles", []) if r not in roles)
    return roles


def normalize_role(role: str) -> str:
    role = role.strip().lower()
    if role.startswith(ROLE_PREFIX):
        role = role[len(ROLE_PREFIX):]
    return role


def has_role(roles: Optional[Iterable[str]], required_role: str) -> bool:
    """Check if any role matches, ignoring case and a ROLE_ prefix."""
    wanted = normalize_role(required_role)
    return any(isinstance(role, str) and normalize_role(role) == wanted for role in roles or ())


def caller_from_claims(claims: dict) -> CallerIdentity:
    """Build the caller identity from validated token claims."""
    username = ""
    for key in ("preferred_username", "sub"):
        value = claims.get(key)
        if isinstance(value, str) and value:
            username = value
            break
    return CallerIdentity(username=username, roles=tuple(collect_roles(claims)))


def require_role(roles: Optional[Iterable[str]], required_role: Optional[str]) -> None:
    """Guard an operation; an empty required role admits any authenticated caller.

    Raises:
        AuthorizationDenied: If no role satisfies the requirement
    """
    if not required_role:
        return
    if not has_role(roles, required_role):
        raise AuthorizationDenied(required_role)
