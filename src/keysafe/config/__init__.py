"""Configuration loader for keysafe.

Loads settings from a YAML file with built-in defaults. Supports environment
variable overrides using the KEYSAFE_ prefix with double-underscore
nesting (e.g., KEYSAFE_STORE__BACKEND=memory).
"""

from __future__ import annotations

import os
import pathlib
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

DEFAULT_SCOPE = "com.workfast.app"


# ---------------------------------------------------------------------------
# Config sub-models
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    bundle_id: str | None = None


class StoreConfig(BaseModel):
    backend: Literal["auto", "keychain", "encrypted_file", "memory"] = "auto"
    file_path: str = "./data/secrets.enc"
    master_password: str = ""
    reset_scope: Literal["record_class", "service"] = "record_class"


class LoggingConfig(BaseModel):
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def resolve_scope(settings: Settings) -> str:
    """Derive the record scope from the application identity."""
    bundle_id = (settings.app.bundle_id or "").strip()
    return bundle_id or DEFAULT_SCOPE


# ---------------------------------------------------------------------------
# Deep merge helper
# ---------------------------------------------------------------------------

def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into *base*, returning a new dict."""
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "KEYSAFE_"


def _collect_env_overrides() -> dict[str, Any]:
    """Collect KEYSAFE_* env vars and build a nested dict.

    Double-underscore separates nesting levels.
    Example: KEYSAFE_STORE__BACKEND=memory
    becomes  {"store": {"backend": "memory"}}

    Values stay strings; pydantic coerces them per field.
    """
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        parts = key[len(_ENV_PREFIX) :].lower().split("__")
        if len(parts) < 2:
            continue
        current = overrides
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
    return overrides


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_BUILTIN_DEFAULTS_PATH = pathlib.Path(__file__).resolve().parents[3] / "config" / "keysafe_defaults.yaml"


def load_settings(
    config_path: pathlib.Path | None = None,
) -> Settings:
    """Load settings with layered precedence: defaults < file < env vars.

    Parameters
    ----------
    config_path:
        Path to a YAML config file. If ``None`` the bundled defaults file is
        used; a missing file falls back to model defaults.
    """
    base: dict[str, Any] = {}

    path = config_path if config_path is not None else _BUILTIN_DEFAULTS_PATH
    if path.exists():
        with open(path) as fh:
            file_data = yaml.safe_load(fh)
        if isinstance(file_data, dict):
            base = _deep_merge(base, file_data)

    env_overrides = _collect_env_overrides()
    if env_overrides:
        base = _deep_merge(base, env_overrides)

    return Settings(**base)
