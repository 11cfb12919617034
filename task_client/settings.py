"""Client settings loaded from ``TASKFLOW_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKFLOW"

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 5.0
DEFAULT_SESSION_FILE = Path("~/.taskflow/session.json")


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default.expanduser()
    return Path(raw).expanduser()


@dataclass(frozen=True)
class ClientSettings:
    """Where the API lives, how long to wait for it, and where to keep the session."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    session_file: Path = DEFAULT_SESSION_FILE.expanduser()

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            api_url=os.getenv(_k("API_URL"), "").strip() or DEFAULT_API_URL,
            timeout=_env_float(_k("API_TIMEOUT"), DEFAULT_TIMEOUT),
            session_file=_env_path(_k("SESSION_FILE"), DEFAULT_SESSION_FILE),
        )
