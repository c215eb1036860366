"""Configuration utility functions."""

import os
import re
from copy import deepcopy
from pathlib import Path
from typing import Any
from typing import TypeVar


T = TypeVar('T', bound=dict[str, Any])

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

def deep_merge(base: T, override: T) -> T:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to override base values

    Returns:
        Merged dictionary
    """
    result = deepcopy(base)

    for key, value in override.items():
        if (
            key in result and
            isinstance(result[key], dict) and
            isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result

def resolve_path(
    path: str | Path,
    base_dir: str | Path | None = None,
    create: bool = False
) -> Path:
    """Resolve path relative to base directory.

    Args:
        path: Path to resolve
        base_dir: Base directory for relative paths
        create: Whether to create the directory

    Returns:
        Resolved Path object
    """
    if isinstance(path, str):
        path = Path(path)

    if not path.is_absolute() and base_dir is not None:
        path = Path(base_dir) / path

    if create:
        path.mkdir(parents=True, exist_ok=True)

    return path

def is_valid_email(address: str | None) -> bool:
    """Check that an address looks like ``local@domain.tld``."""
    return bool(address) and EMAIL_PATTERN.match(address) is not None

def get_config_paths(config_dir: str | Path | None = None) -> dict[str, Path]:
    """Get configuration file paths.

    Args:
        config_dir: Base configuration directory

    Returns:
        Dictionary of configuration file paths
    """
    if config_dir is None:
        config_dir = os.getenv("GOLFLESSON_CONFIG_DIR", "config")

    base_path = Path(config_dir)

    return {
        'config': base_path / 'config.yaml',
        'logging': base_path / 'logging_config.yaml',
    }
