"""Shared test fixtures."""

import json
from collections.abc import Callable
from datetime import datetime

import httpx
import pytest

from meal_tracker.adapters.api_client import HttpxApiClient
from meal_tracker.adapters.local_storage import InMemoryStorage
from meal_tracker.adapters.navigation import InMemoryNavigator
from meal_tracker.config import Settings
from meal_tracker.domain.credentials import Credential, Viewer
from meal_tracker.domain.meals import Meal, Profile
from meal_tracker.domain.roles import Role
from meal_tracker.services.sessions import SessionStore

BASE_URL = "https://api.test/api"


def make_viewer(
    username: str = "bob",
    token: str = "abc",
    calorie_target: int = 2000,
    avatar: str | None = None,
    role: Role = Role.REGULAR,
) -> Viewer:
    """Build a viewer for tests."""
    return Viewer(
        credential=Credential(username=username, token=token),
        calorie_target=calorie_target,
        avatar=avatar,
        role=role,
    )


def make_meal(
    created_at: datetime,
    calories: int,
    slug: str | None = None,
    author: str = "bob",
) -> Meal:
    """Build a meal for tests."""
    return Meal(
        slug=slug or f"meal-{created_at.isoformat()}",
        author=Profile(username=author, image=None),
        created_at=created_at,
        description="test meal",
        calories=calories,
    )


def meal_payload(
    slug: str = "oatmeal",
    calories: int = 350,
    created_at: str = "2024-03-01T08:00:00Z",
    author: str = "bob",
) -> dict[str, object]:
    """Build a meal as the API returns it."""
    return {
        "slug": slug,
        "description": "Oatmeal with berries",
        "calories": calories,
        "createdAt": created_at,
        "author": {"username": author, "image": None, "following": False},
    }


def user_payload(**overrides: object) -> dict[str, object]:
    """Build a user object as the authentication endpoints return it."""
    payload: dict[str, object] = {
        "email": "bob@example.com",
        "token": "jwt-token",
        "username": "bob",
        "bio": None,
        "image": None,
        "expectedCalories": 1800,
    }
    payload.update(overrides)
    return payload


def mock_api(
    handler: Callable[[httpx.Request], httpx.Response],
) -> HttpxApiClient:
    """Create an API client whose requests are answered by a handler."""
    transport = httpx.MockTransport(handler)
    return HttpxApiClient(
        base_url=BASE_URL,
        http_client=httpx.AsyncClient(transport=transport),
    )


def request_json(request: httpx.Request) -> dict[str, object]:
    """Decode a captured request body."""
    return json.loads(request.content.decode())


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def navigator() -> InMemoryNavigator:
    return InMemoryNavigator()


@pytest.fixture
def session_store(
    storage: InMemoryStorage, navigator: InMemoryNavigator
) -> SessionStore:
    return SessionStore(storage=storage, navigator=navigator)


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    for key in (
        "MEAL_TRACKER_API_BASE_URL",
        "MEAL_TRACKER_STORAGE_PATH",
        "MEAL_TRACKER_RESULTS_PER_PAGE",
        "MEAL_TRACKER_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return Settings(api_base_url=BASE_URL, _env_file=None)
