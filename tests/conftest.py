"""
Shared fixtures.

API tests run against a fresh application per test with the in-memory
document store, so no MongoDB server is needed.
"""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from exercise_tracker.config.settings import get_settings


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """A TestClient for an isolated app in mock mode."""
    monkeypatch.setenv("MONGO_MOCK_MODE", "true")
    get_settings.cache_clear()

    from exercise_tracker.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client

    get_settings.cache_clear()


@pytest.fixture
def create_user(client: TestClient) -> Callable[[str], dict]:
    """Register a user and return the response body."""

    def _create(username: str) -> dict:
        response = client.post("/api/users", data={"username": username})
        assert response.status_code == 200, response.text
        return response.json()

    return _create


@pytest.fixture
def add_exercise(client: TestClient) -> Callable[..., dict]:
    """Add an exercise for a user and return the response body."""

    def _add(user_id: str, description: str, duration: int, date: str | None = None) -> dict:
        data = {"description": description, "duration": str(duration)}
        if date is not None:
            data["date"] = date
        response = client.post(f"/api/users/{user_id}/exercises", data=data)
        assert response.status_code == 200, response.text
        return response.json()

    return _add
