import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("API_BASE_URL", "https://platform.test/api")
os.environ.setdefault("MEDIA_STORAGE_BASE_URL", "https://platform.test/storage")
os.environ.setdefault("CTA_REVEAL_DELAY_SECONDS", "5")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient

from campaign_player import deps
from campaign_player.auth.session import AuthSession
from campaign_player.enums import UserRoleEnum
from campaign_player.main import app
from campaign_player.schemas.users import User


def _reset_state() -> None:
    deps.mount_registry.clear()
    deps.session_store.clear()
    deps.query_cache.clear()


@pytest.fixture(autouse=True)
def reset_state():
    _reset_state()
    yield
    _reset_state()
    app.dependency_overrides.clear()


@pytest.fixture()
def tracked_events(monkeypatch):
    events: list[dict] = []

    async def fake_track_event(*, payload: dict):
        events.append(payload)
        return {"success": True}

    monkeypatch.setattr(deps.api_client, "track_event", fake_track_event)
    return events


@pytest.fixture()
def api_client(tracked_events):
    with TestClient(app) as client:
        yield client


def build_user(*, user_id: int = 1, role: UserRoleEnum = UserRoleEnum.admin, name: str = "Ada") -> User:
    return User(
        id=user_id,
        name=name,
        email=f"{name.lower()}@example.com",
        username=name.lower(),
        role=role,
    )


def _sign_in(*, token: str = "token-admin", user: User | None = None) -> dict[str, str]:
    session = deps.session_store.save(AuthSession(token=token, user=user or build_user()))
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture()
def make_user():
    return build_user


@pytest.fixture()
def sign_in():
    """Stores a session and returns the Authorization header for it."""
    return _sign_in
