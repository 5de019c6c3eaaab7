"""
Local secret cache.

A dotenv file at the project root whose values seed the ``SECRETS``
template variable.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values

from vaulty.shared.infrastructure.config import settings
from vaulty.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def local_cache_path(project_root: Path) -> Path:
    return project_root / settings.local_cache_filename


def read_local_secrets(project_root: Path) -> dict[str, str]:
    """Read the cache file. A missing file yields an empty mapping."""
    path = local_cache_path(project_root)
    if not path.is_file():
        return {}

    values = {key: value or "" for key, value in dotenv_values(path).items()}
    logger.debug("local_secrets_loaded", path=str(path), keys=len(values))
    return values
