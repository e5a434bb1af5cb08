import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_NOTE_PATH = "physician_note1.txt"
DEFAULT_API_URL = "https://alert-api.com/DrExtract"
DEFAULT_TIMEOUT = 30.0

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass(frozen=True)
class Settings:
    note_path: str
    api_url: str
    request_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    service_name: str = "dme-extractor"


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logging.getLogger("config").warning(f"[CONFIG] Invalid REQUEST_TIMEOUT={raw!r}, using {DEFAULT_TIMEOUT}")
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def load_settings(note_path_override: Optional[str] = None) -> Settings:
    """Read settings from the environment (and a .env file, if present)."""
    load_dotenv()

    note_path = os.getenv("PHYSICIAN_NOTE_PATH") or DEFAULT_NOTE_PATH
    if note_path_override and note_path_override.strip():
        note_path = note_path_override

    return Settings(
        note_path=note_path,
        api_url=os.getenv("API_URL") or DEFAULT_API_URL,
        request_timeout=_parse_timeout(os.getenv("REQUEST_TIMEOUT")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        service_name=os.getenv("SERVICE_NAME", "dme-extractor"),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
