import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "BookHub API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///./bookhub.db"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8020"]

    # Populate an empty catalog with sample books on startup
    seed_catalog: bool = True

    # Real-time channel (Socket.IO), served from the same origin as the API
    realtime_path: str = "socket.io"
    realtime_ping_interval: int = 25
    realtime_ping_timeout: int = 60
    realtime_max_http_buffer_size: int = 1_000_000
    realtime_allow_upgrades: bool = True

    # Google Books import
    google_books_base_url: str = "https://www.googleapis.com/books/v1"
    google_books_timeout: float = 15.0
    import_default_price: int = 399
    import_default_stock: int = 25
    usd_to_inr_rate: float = 83.0

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_realtime: str = "INFO"         # Socket.IO hub and engine

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Normalise the realtime mount path (no surrounding slashes)."""
        stripped = self.realtime_path.strip("/")
        if stripped != self.realtime_path:
            _config_logger.debug(
                "Normalised realtime_path %r -> %r", self.realtime_path, stripped
            )
            object.__setattr__(self, "realtime_path", stripped)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
