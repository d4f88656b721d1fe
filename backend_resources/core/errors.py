"""Error taxonomy and result values for the user-management façade.

Failures travel as values (``Result.failure``) from the gateway through the
service; the HTTP layer raises ``result.error`` so the blueprint error handler
renders it. Nothing here performs I/O.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_ERROR_STATUS = 500

# Statuses describing the façade's own Keycloak credentials, not the caller's request
UNMAPPABLE_STATUSES = frozenset({401, 403})


class OperationError(Exception):
    """Mapped outcome of a failed operation, consumed once by the response layer."""

    status = DEFAULT_ERROR_STATUS

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        if status is not None:
            self.status = status
        super().__init__(message)


class ValidationError(OperationError):
    """One or more request fields failed their constraint."""

    status = 400

    def __init__(self, violations: dict[str, str]):
        self.violations = dict(violations)
        super().__init__("Validation failed for: " + ", ".join(sorted(self.violations)))

    def to_dict(self) -> dict[str, str]:
        return dict(self.violations)


class BackendOperationError(OperationError):
    """The IAM system rejected or failed an operation."""


class AuthorizationDenied(OperationError):
    """Caller's roles do not satisfy the operation's required role."""

    status = 403

    def __init__(self, required_role: str):
        self.required_role = required_role
        super().__init__(f"Required role: {required_role}")


@dataclass(frozen=True)
class RemoteFailure:
    """A gateway call failed; status and message are the remote's, unchanged.

    ``status`` is None when the request never got an HTTP answer.
    """
    message: str
    status: Optional[int] = None
    not_found: bool = False


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success value or error, never both."""
    value: Optional[T] = None
    error: Any = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error) -> "Result[T]":
        if error is None:
            raise ValueError("failure requires an error")
        return cls(error=error)


def map_remote_status(status: Optional[int]) -> int:
    """Mirror a remote 4xx/5xx status; everything else becomes 500."""
    if status is None or status in UNMAPPABLE_STATUSES:
        return DEFAULT_ERROR_STATUS
    if 400 <= status <= 599:
        return status
    return DEFAULT_ERROR_STATUS
