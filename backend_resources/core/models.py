"""Request-scoped value objects."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class UserRequest:
    """Inbound user-creation payload.

    Field names follow the JSON contract (camelCase on the wire).
    """
    username: str
    email: str
    password: str
    first_name: str
    last_name: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserRequest":
        """Build from an already validated JSON object."""
        return cls(
            username=payload["username"],
            email=payload["email"],
            password=payload["password"],
            first_name=payload["firstName"],
            last_name=payload["lastName"],
        )

    def __repr__(self) -> str:
        return f"UserRequest(username={self.username!r}, email={self.email!r})"


@dataclass(frozen=True)
class UserProfile:
    """Composite view of a Keycloak user, its realm roles and its groups."""
    id: str
    first_name: str | None
    last_name: str | None
    email: str | None
    roles: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "roles": list(self.roles),
            "groups": list(self.groups),
        }


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as established from validated token claims."""
    username: str
    roles: tuple[str, ...] = ()
