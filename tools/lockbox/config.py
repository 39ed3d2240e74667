"""Configuration loading.

Config is a JSON file validated against ``CONFIG_SCHEMA``. Every key is
optional; a missing file means defaults throughout.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

from lockbox.auth.hasher import HasherParams
from lockbox.auth.validator import PasswordPolicy
from lockbox.backends.sqlite import DEFAULT_DB_PATH
from lockbox.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".lockbox/config.json"

_POSITIVE_INT = {"type": "integer", "minimum": 1}

CONFIG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "db_path": {"type": "string", "minLength": 1},
        "policy": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "min_length": _POSITIVE_INT,
                "require_digit": {"type": "boolean"},
                "require_username": {"type": "boolean"},
                "require_uppercase": {"type": "boolean"},
                "require_lowercase": {"type": "boolean"},
                "require_special": {"type": "boolean"},
            },
        },
        "hasher": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "time_cost": _POSITIVE_INT,
                "memory_cost": {"type": "integer", "minimum": 8},
                "parallelism": _POSITIVE_INT,
                "hash_len": {"type": "integer", "minimum": 16},
                "salt_len": {"type": "integer", "minimum": 16},
            },
        },
    },
}


@dataclass
class LockboxConfig:
    db_path: str = DEFAULT_DB_PATH
    policy: PasswordPolicy = field(default_factory=PasswordPolicy)
    hasher: HasherParams = field(default_factory=HasherParams)


def parse_config(data: Any) -> LockboxConfig:
    """Validate a decoded config document and build a ``LockboxConfig``.

    Raises:
        ConfigError: if the document does not match ``CONFIG_SCHEMA`` or the
                     values are inconsistent.
    """
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"Invalid config: {e.message}") from e

    try:
        return LockboxConfig(
            db_path=data.get("db_path", DEFAULT_DB_PATH),
            policy=PasswordPolicy(**data.get("policy", {})),
            hasher=HasherParams(**data.get("hasher", {})),
        )
    except ValueError as e:
        raise ConfigError(f"Invalid config: {e}") from e


def load_config(config_path: str | Path = DEFAULT_CONFIG_PATH) -> LockboxConfig:
    """Load configuration from a JSON file, falling back to defaults."""
    path = Path(config_path)
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return LockboxConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return parse_config(data)
