"""
Configuration loading.

Reads ``dmoney.yaml`` when present (with ``${ENV_VAR}`` placeholders),
otherwise builds the config from environment variables.  A ``.env`` file
is loaded into the environment first.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from dmoney.models import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dmoney.yaml"

_PLACEHOLDER = re.compile(r"^\$\{(?P<key>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>.*))?\}$")

# env var → (section, field)
_ENV_FIELDS = {
    "BASE_URL": ("platform", "base_url"),
    "ADMIN_TOKEN": ("platform", "token"),
    "ADMIN_EMAIL": ("platform", "admin_email"),
    "ADMIN_PASSWORD": ("platform", "admin_password"),
    "DMONEY_SECRET_KEY": ("platform", "secret_key"),
    "DMONEY_TIMEOUT": ("platform", "timeout"),
    "DMONEY_STORE_PATH": ("store", "path"),
    "DMONEY_RUN_TIMEOUT": ("scenario", "run_timeout"),
}


def resolve_env(value: Any) -> Any:
    """Recursively resolve ``${VAR}`` / ``${VAR:-default}`` placeholders."""
    if isinstance(value, str):
        m = _PLACEHOLDER.match(value)
        if not m:
            return value
        env_value = os.environ.get(m.group("key"))
        fallback = m.group("default")
        if fallback is None:
            return value if env_value is None else env_value
        # shell ":-" rule: unset or empty both take the default
        return env_value if env_value else fallback
    if isinstance(value, dict):
        return {k: resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_env(v) for v in value]
    return value


def _from_environment() -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for env_key, (section, name) in _ENV_FIELDS.items():
        value = os.environ.get(env_key)
        if value:
            raw.setdefault(section, {})[name] = value
    if os.environ.get("DMONEY_LOG_LEVEL"):
        raw["log_level"] = os.environ["DMONEY_LOG_LEVEL"]
    return raw


def load_config(config_path: str | Path | None = None, use_dotenv: bool = True) -> AppConfig:
    """
    Load suite config from a YAML file.  Falls back to env vars and defaults.
    """
    if use_dotenv:
        load_dotenv()

    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILE)

    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        config = AppConfig.model_validate(resolve_env(raw))
        logger.debug("Loaded config from %s", path)
    else:
        if config_path:
            logger.warning("No config file found at %s — using defaults + env vars.", path)
        config = AppConfig.model_validate(_from_environment())

    # An empty token means "log in instead".
    if not config.platform.token:
        config.platform.token = None
    return config
