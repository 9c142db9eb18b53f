"""Tests for application settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from trackspot.config import Settings, SpotifySettings


class TestDefaults:
    """Test default values."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the out-of-the-box configuration."""
        for name in ("SPOTIFY__CLIENT_ID", "SPOTIFY__CLIENT_SECRET", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.api_prefix == "/api/v1"
        assert settings.log_level == "INFO"
        assert settings.spotify.token_url == "https://accounts.spotify.com/api/token"
        assert settings.spotify.token_expiry_margin_seconds == 60
        assert settings.spotify.has_credentials is False
        assert settings.download.max_attempts == 3
        assert settings.download.retry_delay_seconds == 1.0
        assert settings.storage.location == "./data/covers"


class TestEnvironment:
    """Test nested environment variables."""

    def test_nested_delimiter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that SECTION__FIELD variables land in the nested models."""
        monkeypatch.setenv("SPOTIFY__CLIENT_ID", "env-id")
        monkeypatch.setenv("SPOTIFY__CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("DOWNLOAD__MAX_ATTEMPTS", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.spotify.client_id == "env-id"
        assert settings.spotify.client_secret.get_secret_value() == "env-secret"
        assert settings.spotify.has_credentials is True
        assert settings.download.max_attempts == 5
        assert settings.log_level == "DEBUG"

    def test_secret_is_not_rendered(self) -> None:
        """Test that the client secret never shows up in repr."""
        spotify = SpotifySettings(client_id="id", client_secret="super-secret")

        assert "super-secret" not in repr(spotify)


class TestValidation:
    """Test rejected values."""

    @pytest.mark.parametrize("margin", [0, 30, 59])
    def test_margin_below_sixty_is_rejected(self, margin: int) -> None:
        """Test the minimum token expiry margin."""
        with pytest.raises(ValidationError):
            SpotifySettings(token_expiry_margin_seconds=margin)

    def test_zero_attempts_is_rejected(self) -> None:
        """Test that the download needs at least one attempt."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, download={"max_attempts": 0})

    @pytest.mark.parametrize(("client_id", "secret"), [("", "s"), ("id", ""), ("  ", "  ")])
    def test_partial_credentials(self, client_id: str, secret: str) -> None:
        """Test that both id and secret are needed."""
        spotify = SpotifySettings(client_id=client_id, client_secret=secret)

        assert spotify.has_credentials is False


class TestPaths:
    """Test filesystem helpers."""

    def test_sqlite_db_path(self) -> None:
        """Test extracting the file path from a SQLite URL."""
        settings = Settings(
            _env_file=None, database={"url": "sqlite+aiosqlite:///./data/test.db"}
        )

        assert settings.get_sqlite_db_path() == Path("./data/test.db")

    def test_memory_database_has_no_path(self) -> None:
        """Test that in-memory SQLite has no file."""
        settings = Settings(_env_file=None, database={"url": "sqlite+aiosqlite:///:memory:"})

        assert settings.get_sqlite_db_path() is None

    def test_ensure_directories(self, tmp_path: Path) -> None:
        """Test that the DB parent and cover dirs are created."""
        settings = Settings(
            _env_file=None,
            database={"url": f"sqlite+aiosqlite:///{tmp_path / 'db' / 'trackspot.db'}"},
            storage={"location": str(tmp_path / "covers")},
        )

        settings.ensure_directories()

        assert (tmp_path / "db").is_dir()
        assert (tmp_path / "covers").is_dir()
