"""
Tests for the HTTP API - routes, status codes and response shapes.
"""

from datetime import timedelta

import pytest

from jobtracker.core.security import TokenService

from tests.conftest import TEST_SECRET

USER = {
    "name": "Al",
    "surname": "Smith",
    "username": "al",
    "email": "a@x.com",
    "password": "p",
}
JOB = {"title": "T", "description": "d1", "endDate": "2025-12-31"}


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token(client) -> str:
    """Register and log in the default user over HTTP."""
    client.post("/api/v1/auth/register", json=USER)
    response = client.post("/api/v1/auth/login", json={"identifier": "al", "password": "p"})
    return response.json()["token"]


class TestHealth:
    """Test service endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health_reports_user_count(self, client, data_file):
        client.post("/api/v1/users", json=USER)

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["users"] == 1
        assert body["data_file"] == str(data_file)


class TestUsersRoutes:
    """Test the unprotected user routes."""

    def test_list_users_empty(self, client):
        response = client.get("/api/v1/users")

        assert response.status_code == 200
        assert response.json() == []

    def test_add_user(self, client):
        response = client.post("/api/v1/users", json=USER)

        assert response.status_code == 201
        assert response.json() == {**USER, "jobs": []}

    def test_add_user_duplicate_is_conflict(self, client):
        client.post("/api/v1/users", json=USER)

        response = client.post("/api/v1/users", json=USER)

        assert response.status_code == 409
        assert response.json() == {"detail": "User already exists"}

    def test_add_user_missing_field_is_rejected(self, client):
        response = client.post("/api/v1/users", json={"username": "al"})

        assert response.status_code == 422

    def test_get_user(self, client):
        client.post("/api/v1/users", json=USER)

        response = client.get("/api/v1/users/al")

        assert response.status_code == 200
        assert response.json()["email"] == "a@x.com"

    def test_get_missing_user_is_null(self, client):
        response = client.get("/api/v1/users/nobody")

        assert response.status_code == 200
        assert response.json() is None

    def test_add_job(self, client):
        client.post("/api/v1/users", json=USER)

        response = client.post("/api/v1/users/jobs", json={"username": "al", "job": JOB})

        assert response.status_code == 200
        assert response.json()["jobs"] == [JOB]

    def test_add_job_unknown_user_is_not_found(self, client):
        response = client.post("/api/v1/users/jobs", json={"username": "nobody", "job": JOB})

        assert response.status_code == 404
        assert response.json() == {"detail": "User not found"}

    def test_username_with_slash(self, client):
        """Test that a username containing '/' can be fetched and given jobs."""
        client.post("/api/v1/users", json={**USER, "username": "a/b"})

        fetched = client.get("/api/v1/users/a%2Fb")
        added = client.post("/api/v1/users/jobs", json={"username": "a/b", "job": JOB})

        assert fetched.status_code == 200
        assert fetched.json()["username"] == "a/b"
        assert added.status_code == 200
        assert added.json()["jobs"] == [JOB]

    def test_user_named_jobs_can_be_fetched(self, client):
        client.post("/api/v1/users", json={**USER, "username": "jobs"})

        response = client.get("/api/v1/users/jobs")

        assert response.json()["username"] == "jobs"


class TestAuthRoutes:
    """Test register and login envelopes."""

    def test_register(self, client):
        body = client.post("/api/v1/auth/register", json=USER).json()

        assert body["message"] == "Registration successful"
        assert body["error"] is None
        assert body["token"] is None
        assert body["user"]["username"] == "al"
        assert body["user"]["password"] != "p"

    def test_register_twice_is_soft_failure(self, client):
        client.post("/api/v1/auth/register", json=USER)

        response = client.post("/api/v1/auth/register", json=USER)

        assert response.status_code == 200
        assert response.json() == {
            "user": None,
            "message": None,
            "error": "User already exists",
            "token": None,
        }

    def test_login(self, client):
        client.post("/api/v1/auth/register", json=USER)

        body = client.post(
            "/api/v1/auth/login", json={"identifier": "a@x.com", "password": "p"}
        ).json()

        assert body["message"] == "Login successful"
        assert body["token"]

    def test_login_wrong_password(self, client):
        client.post("/api/v1/auth/register", json=USER)

        body = client.post(
            "/api/v1/auth/login", json={"identifier": "al", "password": "wrong"}
        ).json()

        assert body["user"] is None
        assert body["error"] == "Invalid password"


class TestJobRoutes:
    """Test the token-protected job routes."""

    def test_create_update_delete_flow(self, client, token):
        created = client.post("/api/v1/jobs", json=JOB, headers=auth_header(token)).json()
        assert created["message"] == "Job added successfully"
        assert created["user"]["jobs"] == [JOB]

        changed = {**JOB, "description": "d2"}
        updated = client.put("/api/v1/jobs/T", json=changed, headers=auth_header(token)).json()
        assert updated["message"] == "Job updated successfully"

        stored = client.get("/api/v1/users/al").json()
        assert stored["jobs"][0]["description"] == "d2"

        deleted = client.delete("/api/v1/jobs/T", headers=auth_header(token)).json()
        assert deleted["message"] == "Job deleted successfully"
        assert deleted["user"]["jobs"] == []

    def test_title_with_spaces_and_slashes(self, client, token):
        job = {**JOB, "title": "Q3 report / draft"}
        client.post("/api/v1/jobs", json=job, headers=auth_header(token))

        body = client.delete(
            "/api/v1/jobs/Q3 report / draft", headers=auth_header(token)
        ).json()

        assert body["message"] == "Job deleted successfully"

    def test_missing_token_is_unauthorized(self, client, token):
        client.post("/api/v1/jobs", json=JOB, headers=auth_header(token))

        response = client.delete("/api/v1/jobs/T")

        assert response.status_code == 200
        assert response.json()["error"] == "Unauthorized"
        assert len(client.get("/api/v1/users/al").json()["jobs"]) == 1

    def test_expired_token_is_unauthorized(self, client, token):
        expired = TokenService(secret_key=TEST_SECRET, expires_delta=timedelta(seconds=-10))
        stale = expired.issue("al", "a@x.com")

        body = client.post("/api/v1/jobs", json=JOB, headers=auth_header(stale)).json()

        assert body == {"user": None, "message": None, "error": "Unauthorized", "token": None}

    def test_malformed_header_is_unauthorized(self, client, token):
        body = client.post(
            "/api/v1/jobs", json=JOB, headers={"Authorization": "Basic abc"}
        ).json()

        assert body["error"] == "Unauthorized"

    def test_update_missing_job(self, client, token):
        body = client.put("/api/v1/jobs/missing", json=JOB, headers=auth_header(token)).json()

        assert body["error"] == "Job not found"


class TestStoreErrors:
    """Test that an unreadable data file surfaces as a server error."""

    def test_corrupt_data_file_is_server_error(self, client, data_file):
        data_file.parent.mkdir(parents=True, exist_ok=True)
        data_file.write_text("[{broken", encoding="utf-8")

        response = client.get("/api/v1/users")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"
