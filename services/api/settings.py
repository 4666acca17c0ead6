# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    # Storage settings
    # JSON files by default; switch via .env (STORAGE_BACKEND=sqlite)
    storage_backend: str = "json"
    data_dir: str = "data"
    db_url: str = "sqlite:///data/devlog.db"

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:3001,http://localhost:8000"

    # Editor
    history_limit: int = Field(default=10, ge=1, description="Undo steps kept per editor session")
    session_ttl_seconds: int = Field(default=3600, ge=1, description="Idle editor sessions expire after this")
    max_sessions: int = Field(default=256, ge=1)

    # Versions-with-cards lookup cache (invalidated on page save)
    cards_cache_ttl_seconds: int = Field(default=30, ge=0)

    # Remote page gateway. Empty = editor sessions use the local storage backend.
    # Example in .env:
    # GATEWAY_BASE_URL=https://devlog.example.com
    gateway_base_url: Optional[str] = None
    gateway_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
