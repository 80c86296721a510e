"""
Runtime configuration for the SERENO mood assessment service.

Settings come from environment variables; a ``.env`` file in the working
directory is loaded first if present.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://localhost:8000"


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    reload: bool = False
    base_url: str = DEFAULT_BASE_URL


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    load_dotenv()
    return Settings(
        host=os.getenv("SERENO_HOST", Settings.host).strip(),
        port=int(os.getenv("SERENO_PORT", str(Settings.port))),
        log_level=os.getenv("SERENO_LOG_LEVEL", Settings.log_level).strip().lower(),
        reload=_is_true(os.getenv("SERENO_RELOAD", "")),
        base_url=os.getenv("SERENO_BASE_URL", Settings.base_url).strip(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _is_true(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}
