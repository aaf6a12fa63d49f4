"""Configuration helpers for loading environment variables.

Variables defined in a project-level ``.env`` file are loaded before the
process environment is consulted.  Consumers should rely on :func:`get_env`
or :meth:`StoreSettings.from_env` instead of calling :func:`os.getenv`
directly so that the configuration is loaded in a single, well-defined place.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


@lru_cache(maxsize=1)
def _load_environment() -> None:
    """Load environment variables from the project's ``.env`` file.

    The loader first attempts to read ``.env`` from the repository root.  If the
    file does not exist we still call :func:`load_dotenv` to allow the default
    discovery mechanism to run.  Subsequent calls are cached so the file is only
    read once per process.
    """

    project_root = Path(__file__).resolve().parents[1]
    env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value for ``key`` from the environment.

    Parameters
    ----------
    key:
        The name of the environment variable to look up.
    default:
        The value to return when ``key`` is not present.
    """

    _load_environment()
    return os.environ.get(key, default)


def _get_float(key: str, default: float) -> float:
    raw = get_env(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc


def _get_int(key: str, default: int) -> int:
    raw = get_env(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigurationError(f"{key} must be at least 1, got {value}")
    return value


@dataclass(frozen=True)
class StoreSettings:
    """Connection settings for the HTTP document/graph store."""

    url: str = "http://localhost:8529"
    database: str = "_system"
    username: str = "root"
    password: str = ""
    timeout: float = 10.0
    connect_retries: int = 3
    collection_naming: str | None = None

    @classmethod
    def from_env(cls) -> "StoreSettings":
        """Build settings from ``ARANGO_*`` environment variables."""

        return cls(
            url=(get_env("ARANGO_URL") or cls.url).rstrip("/"),
            database=get_env("ARANGO_DATABASE") or cls.database,
            username=get_env("ARANGO_USERNAME") or cls.username,
            password=get_env("ARANGO_PASSWORD", cls.password) or "",
            timeout=_get_float("ARANGO_TIMEOUT", cls.timeout),
            connect_retries=_get_int("ARANGO_CONNECT_RETRIES", cls.connect_retries),
            collection_naming=get_env("ARANGO_COLLECTION_NAMING") or None,
        )


__all__ = ["StoreSettings", "get_env"]
