"""HTTP tests for /api/users."""
import pytest

from backend_resources.core.errors import RemoteFailure, Result

from tests.conftest import USER_ID

VALID_USER = {
    "username": "username",
    "email": "email@example.com",
    "password": "password",
    "firstName": "firstName",
    "lastName": "lastName",
}


class TestCreate:
    def test_create_returns_200_with_empty_body(self, client, auth_headers, fake_gateway):
        response = client.post("/api/users", json=VALID_USER, headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 200
        assert response.data == b""
        assert fake_gateway.call_names == ["create_user"]

    def test_backend_failure_returns_status_and_plain_message(self, client, auth_headers, fake_gateway):
        fake_gateway.create_result = Result.failure(RemoteFailure("User creation failed", 500))

        response = client.post("/api/users", json=VALID_USER, headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 500
        assert response.get_data(as_text=True) == "User creation failed"
        assert response.content_type.startswith("text/plain")

    def test_conflict_is_mirrored(self, client, auth_headers, fake_gateway):
        fake_gateway.create_result = Result.failure(RemoteFailure("User exists with same username", 409))

        response = client.post("/api/users", json=VALID_USER, headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 409
        assert response.get_data(as_text=True) == "User exists with same username"

    def test_validation_reports_all_fields(self, client, auth_headers, fake_gateway):
        payload = {"username": "a", "email": "asdasd", "password": "123", "firstName": "", "lastName": ""}

        response = client.post("/api/users", json=payload, headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 400
        assert response.get_json() == {
            "username": "Username should be between 2 and 30 characters long",
            "email": "Email should be valid",
            "password": "Password should be greater than 4 characters long",
            "firstName": "must not be blank",
            "lastName": "must not be blank",
        }
        assert fake_gateway.calls == []

    @pytest.mark.parametrize("body", ["[1, 2]", "not json", '"text"'])
    def test_non_object_body_is_bad_request(self, client, auth_headers, body):
        response = client.post(
            "/api/users",
            data=body,
            content_type="application/json",
            headers=auth_headers(["MODERATOR"]),
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "Bad Request"

    def test_forbidden_without_moderator(self, client, auth_headers, fake_gateway):
        response = client.post("/api/users", json=VALID_USER, headers=auth_headers(["USER"]))

        assert response.status_code == 403
        assert fake_gateway.calls == []

    def test_forbidden_checked_before_validation(self, client, auth_headers):
        response = client.post("/api/users", json={}, headers=auth_headers(["USER"]))

        assert response.status_code == 403

    def test_unauthenticated(self, client, fake_gateway):
        response = client.post("/api/users", json=VALID_USER)

        assert response.status_code == 401
        assert response.get_json()["error"] == "Unauthorized"
        assert fake_gateway.calls == []


class TestGetUserById:
    def test_returns_profile_json(self, client, auth_headers):
        response = client.get(f"/api/users/{USER_ID}", headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 200
        assert response.content_type == "application/json"
        assert response.get_json() == {
            "id": USER_ID,
            "firstName": "tmp",
            "lastName": "tmp_lastName",
            "email": "tmp@example.com",
            "roles": ["MODERATOR", "offline_access"],
            "groups": ["staff", "moderators"],
        }

    def test_not_found(self, client, auth_headers, fake_gateway):
        fake_gateway.profile_result = Result.failure(RemoteFailure("User not found", 404, not_found=True))

        response = client.get(f"/api/users/{USER_ID}", headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 404
        assert response.get_data(as_text=True) == "User not found"
        assert fake_gateway.call_names == ["fetch_profile"]

    def test_role_lookup_failure_is_not_partial(self, client, auth_headers, fake_gateway):
        fake_gateway.memberships_result = Result.failure(RemoteFailure("roles unavailable", 503))

        response = client.get(f"/api/users/{USER_ID}", headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 503
        assert response.get_data(as_text=True) == "roles unavailable"

    @pytest.mark.parametrize("user_id", ["not-a-uuid", USER_ID.replace("-", "")])
    def test_invalid_id(self, client, auth_headers, fake_gateway, user_id):
        response = client.get(f"/api/users/{user_id}", headers=auth_headers(["MODERATOR"]))

        assert response.status_code == 400
        assert response.get_json() == {"id": "Invalid user id"}
        assert fake_gateway.calls == []

    def test_forbidden_when_not_moderator(self, client, auth_headers, fake_gateway):
        response = client.get(f"/api/users/{USER_ID}", headers=auth_headers(["USER"]))

        assert response.status_code == 403
        assert response.get_json() == {"error": "Forbidden", "message": "Insufficient permissions"}
        assert fake_gateway.calls == []


class TestHello:
    def test_returns_username_for_moderator(self, client, auth_headers):
        response = client.get("/api/users/hello", headers=auth_headers(["MODERATOR"], username="tmp"))

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "tmp"
        assert response.content_type.startswith("text/plain")

    def test_forbidden_for_other_roles(self, client, auth_headers):
        response = client.get("/api/users/hello", headers=auth_headers(["ADMIN"]))

        assert response.status_code == 403

    def test_any_authenticated_caller_when_no_role_required(self, flask_app, auth_headers):
        flask_app.config["APP_CONFIG"].hello_required_role = ""

        with flask_app.test_client() as client:
            hello = client.get("/api/users/hello", headers=auth_headers(["ADMIN"], username="someone"))
            lookup = client.get(f"/api/users/{USER_ID}", headers=auth_headers(["ADMIN"]))
            create = client.post("/api/users", json=VALID_USER, headers=auth_headers(["ADMIN"]))

        assert hello.status_code == 200
        assert hello.get_data(as_text=True) == "someone"
        assert lookup.status_code == 403
        assert create.status_code == 403

    def test_unauthenticated(self, client):
        assert client.get("/api/users/hello").status_code == 401
