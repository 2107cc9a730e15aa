"""Runtime loader for client settings.

Settings live in ``config/quartermaster.toml``:

    [api]
    base_url = "http://localhost:3001/api"
    timeout = 30.0

    [display]
    serialized_suffix = " - serialized"

QUARTERMASTER_API_URL overrides ``api.base_url`` and is read on every
``load_settings()`` call; only the file contents are cached. A missing file yields the
defaults below.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any

from quartermaster.runtime.logging import get_logger
from quartermaster.runtime.paths import get_paths

logger = get_logger(__name__)

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SERIALIZED_SUFFIX = " - serialized"


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    serialized_suffix: str = DEFAULT_SERIALIZED_SUFFIX


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug("Settings file not found, using defaults: %s", path)
        return {}
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"[{name}] must be a table in quartermaster settings")
    return section


@lru_cache(maxsize=4)
def load_settings_file(config_path: str | None = None) -> Settings:
    """Load settings from TOML only; results are cached per path.

    Args:
        config_path: Optional TOML path override. If None, uses the project default.
    """
    path = Path(config_path) if config_path is not None else get_paths().settings_file
    data = _load_toml(path)
    api = _section(data, "api")
    display = _section(data, "display")

    api_url = api.get("base_url") or DEFAULT_API_URL
    try:
        timeout = float(api.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        raise ValueError(f"api.timeout must be a number, got {api.get('timeout')!r}") from None
    if timeout <= 0:
        raise ValueError(f"api.timeout must be positive, got {timeout}")

    return Settings(
        api_url=str(api_url).rstrip("/"),
        timeout=timeout,
        serialized_suffix=str(display.get("serialized_suffix", DEFAULT_SERIALIZED_SUFFIX)),
    )


def load_settings(config_path: str | None = None) -> Settings:
    """Cached file settings with QUARTERMASTER_API_URL applied on every call."""
    settings = load_settings_file(config_path)
    override = os.environ.get("QUARTERMASTER_API_URL")
    if override:
        settings = replace(settings, api_url=override.rstrip("/"))
    return settings
