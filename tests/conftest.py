"""Shared fixtures for the unit tests."""

from pathlib import Path

import pytest

from trackspot.config import Settings


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a tmp database and storage dir, with fake credentials."""
    return Settings(
        database={"url": f"sqlite+aiosqlite:///{tmp_path / 'trackspot.db'}"},
        spotify={
            "client_id": "test-client-id",
            "client_secret": "test-client-secret",
            "token_url": "https://accounts.spotify.test/api/token",
            "api_base_url": "https://api.spotify.test/v1",
        },
        storage={"location": str(tmp_path / "covers")},
    )
