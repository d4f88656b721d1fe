"""Keycloak Admin API client library.

Architecture:
- client.py: HTTP client with authentication and auto-refresh
- users.py: user creation and user/role/group lookups
- exceptions.py: Typed exceptions for error handling

Usage:
    from backend_resources.core.keycloak import KeycloakClient, UserService

    client = KeycloakClient("http://keycloak:8080")
    client.use_service_account("master", "backend-resources", "secret")

    users = UserService(client)
    user = users.get_user("demo", "550e8400-e29b-41d4-a716-446655440000")
"""
from .client import (
    KeycloakClient,
    extract_error_message,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    KeycloakAuthenticationError,
    UserNotFoundError,
    UnexpectedResponseError,
)
from .users import UserService

__all__ = [
    # Client
    "KeycloakClient",
    "extract_error_message",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "KeycloakAuthenticationError",
    "UserNotFoundError",
    "UnexpectedResponseError",

    # Services
    "UserService",
]
