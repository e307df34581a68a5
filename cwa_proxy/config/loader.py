"""YAML config loader with environment overrides and dotted-key lookup."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from cwa_proxy.config.defaults import DEFAULT_CITIES
from cwa_proxy.config.schema import ProxyConfig

logger = logging.getLogger(__name__)

API_KEY_ENV = "CWA_API_KEY"
PORT_ENV = "PORT"


def load_config(path: str | Path | None = None) -> ProxyConfig:
    """Load and validate config from an optional YAML file.

    A path that does not exist is skipped with a warning and defaults apply.
    If no cities are specified, injects DEFAULT_CITIES. The CWA_API_KEY and
    PORT environment variables override the file when set.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        else:
            logger.warning("Config file %s not found, using defaults", path)

    if "cities" not in raw or not raw["cities"]:
        raw["cities"] = list(DEFAULT_CITIES)

    api_key = os.environ.get(API_KEY_ENV)
    if api_key:
        raw["api_key"] = api_key

    port = os.environ.get(PORT_ENV)
    if port:
        raw.setdefault("server", {})
        raw["server"]["port"] = int(port)

    return ProxyConfig(**raw)


def get_config_value(config: ProxyConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'upstream.max_attempts'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def redacted(config: ProxyConfig) -> dict:
    """Dump config for display with the API key masked."""
    data = config.model_dump(mode="json")
    key = data.get("api_key", "")
    if key:
        data["api_key"] = key[:4] + "*" * max(len(key) - 4, 4)
    return data
