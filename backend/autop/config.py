import json
import logging
from typing import Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    database_url: str = "sqlite:///./autop.db"
    debug: bool = False
    cors_origins: List[str] = []

    output_dir: str = "output"
    max_file_size: int = 10 * 1024 * 1024  # 10MB

    # Name understood by autop.engine.adapter.get_engine
    regex_engine: str = "re"

    # Defaults applied when a request does not say otherwise
    autop_br: bool = False
    autop_esc_pre: bool = False
    autop_remove_useless_newlines_in_pre: bool = False

    record_history: bool = True
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> Any:
        """Normalize CORS_ORIGINS from JSON or comma-separated strings."""
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                try:
                    return json.loads(s)
                except ValueError:
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v


settings = Settings()


def configure_logging() -> None:
    """Apply the configured level to the root logger.

    Handlers installed by the hosting server (uvicorn, pytest) are kept.
    """
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
