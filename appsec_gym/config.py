"""Application configuration via environment variables."""

from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Gym settings loaded from APPSEC_GYM_* environment variables."""

    # Storage
    HOME_DIR: Path = Path.home() / ".appsec-gym"
    WORKSPACE_DIR: Optional[Path] = None
    PROGRESS_FILE: Optional[Path] = None

    # External tools
    TOOL_TIMEOUT_SECONDS: float = 120.0
    PROBE_TIMEOUT_SECONDS: float = 5.0
    ENABLE_STATIC_ANALYSIS: bool = True
    ENABLE_DEPENDENCY_SCAN: bool = True
    ESLINT_COMMAND: str = "npx eslint"
    NPM_COMMAND: str = "npm"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "warning"

    model_config = {
        "env_prefix": "APPSEC_GYM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def workspace_path(self) -> Path:
        return self.WORKSPACE_DIR or self.HOME_DIR / "workspace"

    @property
    def progress_path(self) -> Path:
        return self.PROGRESS_FILE or self.HOME_DIR / "progress.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
