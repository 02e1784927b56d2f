"""Configuration utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

import yaml

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="RouterConfig")

DEFAULT_METHODS = ["HEAD", "OPTIONS", "GET", "PUT", "PATCH", "POST", "DELETE"]


@dataclass
class RouterConfig:
    """Router configuration."""

    # Mount path applied to every route
    prefix: str = ""

    # Matching (defaults for each route)
    sensitive: bool = False
    strict: bool = False
    end: bool = True

    # Methods registered by Router.all()
    methods: List[str] = field(default_factory=lambda: list(DEFAULT_METHODS))

    # Logging
    log_requests: bool = False
    log_skip_paths: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Create config from dictionary."""
        # Filter to only valid fields
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in (data or {}).items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_json(cls: Type[T], path: str) -> T:
        """Load config from JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls: Type[T], path: str) -> T:
        """Load config from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_env(cls: Type[T], prefix: str = "ROADROUTE_") -> T:
        """Load config from environment variables."""
        return cls.from_dict(env_overrides(prefix))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {}
        for field_name in self.__dataclass_fields__:
            result[field_name] = getattr(self, field_name)
        return result

    def merge(self, overrides: Dict[str, Any]) -> "RouterConfig":
        """Return a copy with overrides applied (overrides take precedence)."""
        data = self.to_dict()
        data.update(overrides)
        return type(self).from_dict(data)

    def layer_options(self) -> Dict[str, Any]:
        """Default options for routes registered under this config."""
        return {
            "sensitive": self.sensitive,
            "strict": self.strict,
            "end": self.end,
        }


_LIST_FIELDS = {"methods", "log_skip_paths"}
_STRING_FIELDS = {"prefix"}


def _coerce(key: str, value: str) -> Any:
    """Convert an environment string to a config value."""
    if key in _LIST_FIELDS:
        return [v.strip() for v in value.split(",") if v.strip()]
    if key in _STRING_FIELDS:
        return value

    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def env_overrides(prefix: str = "ROADROUTE_") -> Dict[str, Any]:
    """Collect config values set through environment variables."""
    data = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()
            data[config_key] = _coerce(config_key, value)

    return data


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "ROADROUTE_",
) -> RouterConfig:
    """Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (if provided)
    3. Defaults
    """
    config = RouterConfig()

    # Load from file if provided
    if path:
        path_obj = Path(path)
        if path_obj.exists():
            if path.endswith(".json"):
                config = RouterConfig.from_json(path)
            elif path.endswith((".yaml", ".yml")):
                config = RouterConfig.from_yaml(path)
            else:
                logger.warning(f"Unknown config format: {path}")
        else:
            logger.warning(f"Config file not found: {path}")

    # Override with environment variables
    return config.merge(env_overrides(env_prefix))


__all__ = [
    "RouterConfig",
    "DEFAULT_METHODS",
    "env_overrides",
    "load_config",
]
