from __future__ import annotations

"""
Configuration Domain Management.

Defines the operation mode and cache ages that every component of a
FileSystem receives at construction. Values are resolved from environment
variables, then an optional JSON file, then built-in defaults.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from cachedfs.domain.constants import (
    DEFAULT_CHILDREN_MAX_AGE,
    DEFAULT_DATA_MAX_AGE,
    DEFAULT_STAT_MAX_AGE,
)
from cachedfs.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
ENV_PREFIX = "CACHEDFS_"
ENV_CONFIG_FILE = "CACHEDFS_CONFIG"

_AGE_KEYS = ("stat_max_age", "children_max_age", "data_max_age")


class Mode(str, Enum):
    """Controls which failures raise and which only warn."""

    STRICT = "strict"
    NORMAL = "normal"
    FORGIVING = "forgiving"


@dataclass(frozen=True)
class FsConfig:
    """
    Immutable settings shared by a resolver, its caches and its nodes.

    Attributes:
        mode: Error escalation policy.
        stat_max_age: Seconds a stat result stays fresh.
        children_max_age: Seconds a directory listing stays fresh.
        data_max_age: Seconds file contents stay fresh.
    """
    mode: Mode = Mode.NORMAL
    stat_max_age: float = DEFAULT_STAT_MAX_AGE
    children_max_age: float = DEFAULT_CHILDREN_MAX_AGE
    data_max_age: float = DEFAULT_DATA_MAX_AGE

    @property
    def strict(self) -> bool:
        return self.mode is Mode.STRICT

    @property
    def forgiving(self) -> bool:
        return self.mode is Mode.FORGIVING

    def with_mode(self, mode: Any) -> FsConfig:
        """Return a copy running under another mode."""
        return replace(self, mode=parse_mode(mode))


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------
def parse_mode(value: Any) -> Mode:
    """
    Convert a mode name (any case, surrounding blanks allowed) to Mode.

    Raises:
        ConfigurationError: If the name is not a recognized mode.
    """
    if isinstance(value, Mode):
        return value
    name = str(value or "").strip().lower()
    try:
        return Mode(name)
    except ValueError:
        raise ConfigurationError(
            f"Unknown operation mode: {value!r}. "
            f"Available: {[m.value for m in Mode]}",
            details={"mode": value},
        )


def parse_age(key: str, value: Any) -> float:
    """
    Validate a cache age expressed in seconds.

    Raises:
        ConfigurationError: If the value is not a finite, non-negative number.
    """
    try:
        age = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid value for {key}: {value!r}", details={key: value})
    if math.isnan(age) or math.isinf(age) or age < 0:
        raise ConfigurationError(f"Invalid value for {key}: {value!r}", details={key: value})
    return age


def config_from_mapping(data: Mapping[str, Any], base: Optional[FsConfig] = None) -> FsConfig:
    """
    Overlay recognized keys of a mapping on top of a base configuration.

    Unknown keys are ignored with a debug message.
    """
    cfg = base or FsConfig()
    changes: Dict[str, Any] = {}

    for key, value in data.items():
        if key == "mode":
            changes["mode"] = parse_mode(value)
        elif key in _AGE_KEYS:
            changes[key] = parse_age(key, value)
        else:
            logger.debug(f"Ignoring unknown configuration key: {key}")

    return replace(cfg, **changes) if changes else cfg


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------
def load_config_file(config_file: str) -> Dict[str, Any]:
    """
    Read a JSON configuration file.

    Returns:
        Dict[str, Any]: Parsed content, or an empty dict when the file is
        missing or unreadable.
    """
    if not os.path.exists(config_file):
        logger.debug(f"Config file not found: {config_file}. Using defaults.")
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config from {config_file}: {e}. Using defaults.")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Corrupted config file {config_file}. Using defaults.")
        return {}

    return data


def load_config(
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
) -> FsConfig:
    """
    Resolve the effective configuration.

    Resolution order:
    1. Environment variables (CACHEDFS_MODE, CACHEDFS_STAT_MAX_AGE, ...)
    2. JSON file (explicit argument, else CACHEDFS_CONFIG)
    3. Built-in defaults

    Args:
        config_file: Optional explicit path to a JSON config file.
        environ: Environment mapping, defaults to os.environ.

    Returns:
        FsConfig: The merged configuration.

    Raises:
        ConfigurationError: If any provided value is invalid.
    """
    env = os.environ if environ is None else environ
    path = config_file or env.get(ENV_CONFIG_FILE)

    cfg = FsConfig()
    if path:
        cfg = config_from_mapping(load_config_file(path), cfg)

    overrides: Dict[str, Any] = {}
    for key in ("mode",) + _AGE_KEYS:
        env_name = f"{ENV_PREFIX}{key.upper()}"
        if env_name in env:
            overrides[key] = env[env_name]

    return config_from_mapping(overrides, cfg)
