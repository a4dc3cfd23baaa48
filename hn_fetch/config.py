from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from hn_fetch.constants import (
    DEFAULT_USER_AGENT,
    FETCH_TIMEOUT,
    HN_API_BASE,
    HN_REQUEST_TIMEOUT,
)

CONFIG_DIR = Path.home() / ".config" / "hn_fetch"
CONFIG_FILE = CONFIG_DIR / "config.json"


@dataclass(frozen=True)
class Settings:
    base_url: str = HN_API_BASE
    timeout: float = HN_REQUEST_TIMEOUT
    fetch_timeout: float = FETCH_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


def load_config(path: Optional[Path] = None) -> dict:
    path = path or CONFIG_FILE
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def get_settings(path: Optional[Path] = None) -> Settings:
    config = load_config(path)
    defaults = Settings()
    try:
        return Settings(
            base_url=str(config.get("base_url", defaults.base_url)).rstrip("/"),
            timeout=float(config.get("timeout", defaults.timeout)),
            fetch_timeout=float(config.get("fetch_timeout", defaults.fetch_timeout)),
            user_agent=str(config.get("user_agent", defaults.user_agent)),
        )
    except (TypeError, ValueError):
        return defaults
