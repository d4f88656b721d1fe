"""Errors raised by the Keycloak admin client."""


class KeycloakError(Exception):
    """Base exception for all Keycloak operations."""
    pass


class KeycloakAPIError(KeycloakError):
    """Admin API answered with an error status.

    Attributes:
        status_code: HTTP status code returned by Keycloak
        message: Error message extracted from the response body
        endpoint: Admin API path that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class KeycloakAuthenticationError(KeycloakError):
    """Token request for the service account or admin user was rejected."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{status_code}] token request failed: {message}")


class UserNotFoundError(KeycloakError):
    """No user with this id exists in the realm."""

    def __init__(self, user_id: str, message: str | None = None):
        self.user_id = user_id
        super().__init__(message or f"User '{user_id}' not found")


class UnexpectedResponseError(KeycloakError):
    """Admin API answered with a body that is not the expected JSON shape."""

    def __init__(self, endpoint: str, expected: str):
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: expected {expected}")
