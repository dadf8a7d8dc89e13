"""
Pytest configuration and shared fixtures.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from jobtracker.config import Settings
from jobtracker.core.security import PasswordHasher, TokenService
from jobtracker.main import create_app
from jobtracker.schemas.user import Job, UserInput
from jobtracker.services.job_tracker_service import JobTrackerService
from jobtracker.services.user_store import JsonUserStore

TEST_SECRET = "test-secret-key"


@pytest.fixture
def data_file(tmp_path) -> Path:
    """Path of a not-yet-created data file inside a missing directory."""
    return tmp_path / "data" / "data.json"


@pytest.fixture
def store(data_file) -> JsonUserStore:
    return JsonUserStore(str(data_file))


@pytest.fixture
def hasher() -> PasswordHasher:
    """Low work factor keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret_key=TEST_SECRET)


@pytest.fixture
def service(store, hasher, token_service) -> JobTrackerService:
    return JobTrackerService(store=store, hasher=hasher, token_service=token_service)


@pytest.fixture
def settings(data_file) -> Settings:
    return Settings(
        _env_file=None,
        SECRET_KEY=TEST_SECRET,
        DATA_FILE=str(data_file),
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
        LOG_FORMAT="console",
    )


@pytest.fixture
def client(settings):
    """HTTP client against an app backed by the temporary data file."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def user_input() -> UserInput:
    return UserInput(
        name="Al",
        surname="Smith",
        username="al",
        email="a@x.com",
        password="p",
    )


@pytest.fixture
def job() -> Job:
    return Job(title="T", description="d1", endDate="2025-12-31")


@pytest.fixture
def stored_users() -> List[Dict[str, Any]]:
    """Raw JSON records as they appear in the data file."""
    return [
        {
            "name": "Al",
            "surname": "Smith",
            "username": "al",
            "email": "a@x.com",
            "password": "$2b$04$abcdefghijklmnopqrstuuN5Y8d3S0JvJQ8wEoQ1e8r3tGJmW4Ga",
            "jobs": [
                {"title": "T", "description": "first", "endDate": "2025-01-01"},
                {"title": "U", "description": "second", "endDate": "2025-02-01"},
            ],
        },
        {
            "name": "Bo",
            "surname": "Jones",
            "username": "bo",
            "email": "b@x.com",
            "password": "plain",
            "jobs": [],
        },
    ]


@pytest.fixture
def populated_data_file(data_file, stored_users) -> Path:
    """Data file holding stored_users."""
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text(json.dumps(stored_users, indent=2), encoding="utf-8")
    return data_file
