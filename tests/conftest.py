"""Pytest configuration and shared fixtures."""

import time
from pathlib import Path

import pytest

from agape.backend.auth import Session, User
from agape.backend.client import BackendClient
from agape.config.schema import AgapeConfig
from agape.storage import LocalStorage

BASE_URL = "https://test.supabase.co"
ANON_KEY = "test-anon-key"


def make_session(user_id: str = "user-1", email: str = "ada@example.com", expires_in: int = 3600) -> Session:
    """Build a session for a signed-in user."""
    return Session(
        access_token=f"access-{user_id}",
        refresh_token=f"refresh-{user_id}",
        expires_in=expires_in,
        expires_at=int(time.time()) + expires_in,
        user=User(id=user_id, email=email),
    )


def family_row(family_id: str = "fam-1", **overrides) -> dict:
    """A ``crisis_families`` row as the API returns it."""
    row = {
        "id": family_id,
        "name": f"Family {family_id}",
        "location": "Aleppo, Syria",
        "situation": "Displaced by war",
        "story": "We fled our home.",
        "profile_image_url": f"https://img.example/{family_id}.jpg",
        "cover_image_url": None,
        "video_url": None,
        "fundraising_link": "https://gofundme.com/x",
        "fundraising_goal": 15000,
        "fundraising_current": 5800,
        "verified": True,
        "tags": ["#Syria", "#Hope"],
        "needs": [],
        "created_at": "2024-01-10T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def post_row(post_id: str = "post-1", family_id: str = "fam-1", **overrides) -> dict:
    """A ``family_posts`` row as the API returns it."""
    row = {
        "id": post_id,
        "family_id": family_id,
        "content": "Thank you for your support!",
        "hashtags": ["#Grateful"],
        "created_at": "2024-01-11T12:00:00+00:00",
        "updated_at": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def default_config() -> AgapeConfig:
    """Provide a default configuration for tests."""
    return AgapeConfig()


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    """Provide a temporary local storage."""
    return LocalStorage(tmp_path / "storage.db")


@pytest.fixture
def client() -> BackendClient:
    """Backend client pointed at the mocked project URL."""
    return BackendClient(BASE_URL, ANON_KEY)


@pytest.fixture
def signed_in_client(client: BackendClient) -> BackendClient:
    """Backend client with a live session for ``user-1``."""
    client.auth._session = make_session()
    return client


@pytest.fixture
def make_family_row():
    """Factory for ``crisis_families`` rows."""
    return family_row


@pytest.fixture
def make_post_row():
    """Factory for ``family_posts`` rows."""
    return post_row
