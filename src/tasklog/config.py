"""Service settings, read from the environment (and an optional .env file).

Recognized variables: PORT, HOST, EVENT_FILE, ENVIRONMENT, LOG_LEVEL,
LOG_FILE, STATIC_DIR.
"""

import logging
import sys
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "Task Tracker"
APP_VERSION = "1.2.0"

DEFAULT_EVENT_FILE = Path("eventlist.txt")
STATIC_DIR = Path(__file__).parent / "static"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    port: int = 3000
    host: str = "0.0.0.0"
    event_file: Path = DEFAULT_EVENT_FILE
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Path | None = None
    static_dir: Path = STATIC_DIR
    version: str = APP_VERSION


def setup_logging(settings: Settings) -> None:
    """Configure root logging once: stderr, plus a file when LOG_FILE is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )
