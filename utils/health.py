import os
import shutil
import logging
import threading
from typing import Dict, Any
from enum import Enum
from urllib.parse import urlparse

from utils.config import load_settings

logger = logging.getLogger("health")


class HealthStatus(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


# Track application startup status
_startup_complete = threading.Event()


def mark_startup_complete():
    """Mark application startup as complete"""
    _startup_complete.set()


def is_startup_complete() -> bool:
    return _startup_complete.is_set()


def check_api_url() -> Dict[str, Any]:
    """The order API URL must be an absolute http(s) URL. No request is made."""
    url = load_settings().api_url
    parsed = urlparse(url)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return {"status": HealthStatus.UP, "details": {"apiUrl": url}}
    return {"status": HealthStatus.DOWN, "details": {"apiUrl": url, "error": "API_URL is not an absolute http(s) URL"}}


def check_disk_space() -> Dict[str, Any]:
    """Check disk space where physician notes are read from"""
    try:
        note_dir = os.path.dirname(os.path.abspath(load_settings().note_path))
        check_path = note_dir if os.path.exists(note_dir) else "."

        total, used, free = shutil.disk_usage(check_path)
        free_percent = (free / total) * 100 if total > 0 else 0
        status = HealthStatus.UP if free_percent > 10 else HealthStatus.DOWN

        return {
            "status": status,
            "details": {
                "free": f"{free / (1024 ** 3):.2f}GB",
                "total": f"{total / (1024 ** 3):.2f}GB",
                "freePercent": f"{free_percent:.2f}%"
            }
        }
    except OSError as e:
        logger.error(f"Disk space check failed: {e}")
        return {"status": HealthStatus.DOWN, "details": {"error": str(e)}}


def get_health() -> Dict[str, Any]:
    """Get overall health status"""
    checks = {
        "apiUrl": check_api_url(),
        "disk": check_disk_space(),
    }

    overall_status = HealthStatus.UP
    if any(check["status"] == HealthStatus.DOWN for check in checks.values()):
        overall_status = HealthStatus.DOWN

    return {
        "status": overall_status.value,
        "components": checks
    }


def get_liveness() -> Dict[str, Any]:
    return {"status": HealthStatus.UP.value}


def get_readiness() -> Dict[str, Any]:
    """Readiness probe - not ready until startup completes and the API URL is usable"""
    if not is_startup_complete():
        return {
            "status": HealthStatus.DOWN.value,
            "components": {
                "startup": "in_progress",
                "note": "Application is still starting up"
            }
        }

    api_check = check_api_url()
    return {
        "status": api_check["status"].value,
        "components": {"apiUrl": api_check}
    }


def get_startup() -> Dict[str, Any]:
    # The server is responding either way; only the component note differs
    return {
        "status": HealthStatus.UP.value,
        "components": {"startup": "complete" if is_startup_complete() else "in_progress"}
    }
