"""Health check functionality for golflesson."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from golflesson import __version__
from golflesson.config.types import AppConfig
from golflesson.exceptions import LessonError
from golflesson.storage.document_store import DocumentStore
from golflesson.storage.repositories import ALL_COLLECTIONS
from golflesson.utils.logging_utils import get_logger

logger = get_logger(__name__)

def check_directory_access(path: Path) -> tuple[bool, str]:
    """Check if directory exists and is accessible.

    Args:
        path: Directory path to check

    Returns:
        Tuple of (success, message)
    """
    if not path.exists():
        return False, f"Directory does not exist: {path}"
    if not os.access(path, os.R_OK):
        return False, f"Directory not readable: {path}"
    if not os.access(path, os.W_OK):
        return False, f"Directory not writable: {path}"
    return True, f"Directory accessible: {path}"

def check_store(store: DocumentStore) -> tuple[bool, str]:
    """Check that every collection can be read."""
    try:
        counts = {name: len(store.read(name)) for name in ALL_COLLECTIONS}
    except LessonError as e:
        return False, f"Store error: {e.message}"
    summary = ", ".join(f"{name}={count}" for name, count in counts.items())
    return True, f"Store readable ({summary})"

def check_mail(config: AppConfig) -> tuple[bool, str]:
    """Mail is optional; a missing key is reported but not unhealthy."""
    if config.mail.enabled:
        return True, f"Resend configured, sender {config.mail.sender}"
    return True, "Resend not configured, notifications disabled"

def check_logging() -> tuple[bool, str]:
    """Check if logging is working."""
    test_logger = logging.getLogger("healthcheck")
    test_logger.debug("Health check test log message")
    return True, "Logging system operational"

def get_health_status(config: AppConfig, store: DocumentStore) -> dict[str, Any]:
    """Get complete health status of the application.

    Returns:
        Dictionary containing health status information
    """
    status: dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": [],
        "version": __version__,
    }

    checks: list[tuple[str, tuple[bool, str]]] = [
        ("data_directory", check_directory_access(Path(config.data_dir))),
        ("store", check_store(store)),
        ("mail", check_mail(config)),
        ("logging", check_logging()),
    ]

    for name, (success, message) in checks:
        status["checks"].append({
            "name": name,
            "status": "healthy" if success else "unhealthy",
            "message": message
        })
        if not success:
            status["status"] = "unhealthy"
            logger.warning(f"Health check {name} failed: {message}")

    return status
