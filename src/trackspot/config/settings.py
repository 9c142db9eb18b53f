"""Application configuration using Pydantic Settings.

Environment variables use nested naming with "__" as delimiter:
- DATABASE__URL, SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET
- STORAGE__LOCATION, DOWNLOAD__MAX_ATTEMPTS, OBSERVABILITY__LOG_JSON_FORMAT

The .env file is loaded automatically for development convenience.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database connection and pooling configuration."""

    url: str = "sqlite+aiosqlite:///./data/trackspot.db"
    echo: bool = False
    pool_pre_ping: bool = True
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


class SpotifySettings(BaseModel):
    """Spotify Web API credentials and endpoints (client-credentials grant)."""

    client_id: str = ""
    client_secret: SecretStr = SecretStr("")
    token_url: str = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    api_base_url: str = "https://api.spotify.com/v1"
    request_timeout: float = 10.0
    # Hey future me - the margin is subtracted from the declared token lifetime so a token can't
    # expire while a request is in flight. Anything below 60s reintroduces that race.
    token_expiry_margin_seconds: int = Field(default=60, ge=60)

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id.strip() and self.client_secret.get_secret_value().strip())


class StorageSettings(BaseModel):
    """Local blob storage for cover images."""

    # Kept as str so a blank value reaches LocalBlobStore (ConfigurationError) instead of
    # silently becoming Path(".")
    location: str = "./data/covers"


class DownloadSettings(BaseModel):
    """Cover image download retry policy."""

    max_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    timeout: float = 10.0


class ObservabilitySettings(BaseModel):
    """Logging output options."""

    log_json_format: bool = False


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "trackspot"
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"

    database: DatabaseSettings = DatabaseSettings()
    spotify: SpotifySettings = SpotifySettings()
    storage: StorageSettings = StorageSettings()
    download: DownloadSettings = DownloadSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    def get_sqlite_db_path(self) -> Path | None:
        """Filesystem path of the SQLite database, None for other backends or :memory:."""
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path == ":memory:":
            return None
        return Path(path)

    def ensure_directories(self) -> None:
        """Create data directories (SQLite parent dir, cover storage)."""
        db_path = self.get_sqlite_db_path()
        if db_path is not None:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        if self.storage.location.strip():
            Path(self.storage.location).mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
