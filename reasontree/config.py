# -*- coding: utf-8 -*-
"""
Configuration for reasontree.

Settings come from an optional YAML file merged over built-in defaults:

    completion_marker: "✓"
    chars_per_token: 2
    node_width: 24
    connector_width: 5
    replay_delay: 0.05
    log_level: INFO
    tool_badges:
      SearchTool: {label: Search Tool, icon: "🌐"}

The file path is taken from the caller or from ``REASONTREE_CONFIG``.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .logger_config import logger


class ConfigError(ValueError):
    """Raised when a configuration file has invalid content."""


@dataclass
class ReasonTreeConfig:
    """Runtime settings for decoding, snapshots and rendering.

    Attributes:
        completion_marker: Marker that replaces tool results and conclusions in snapshots
        chars_per_token: Characters per token for the approximate token count
        node_width: Width in terminal cells of a node column in the text rendering
        connector_width: Width in terminal cells of a connector column
        replay_delay: Seconds between chunks when replaying a captured stream
        log_level: Console log level
        tool_badges: Extra or overriding tool badge entries (tool name -> {label, icon, color})
    """

    completion_marker: str = "✓"
    chars_per_token: int = 2
    node_width: int = 24
    connector_width: int = 5
    replay_delay: float = 0.05
    log_level: str = "INFO"
    tool_badges: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.completion_marker, str) or len(self.completion_marker) != 1:
            raise ConfigError("completion_marker must be a single character")
        if self.chars_per_token < 1:
            raise ConfigError("chars_per_token must be at least 1")
        if self.node_width < 4:
            raise ConfigError("node_width must be at least 4")
        if self.connector_width < 3 or self.connector_width % 2 == 0:
            raise ConfigError("connector_width must be an odd number of at least 3")
        if self.replay_delay < 0:
            raise ConfigError("replay_delay must not be negative")
        if not isinstance(self.tool_badges, dict):
            raise ConfigError("tool_badges must be a mapping")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReasonTreeConfig":
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning(f"[Config] Ignoring unknown settings: {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for name, value in data.items():
            if name not in known or value is None:
                continue
            default = getattr(cls(), name)
            try:
                if isinstance(default, bool) or isinstance(default, dict):
                    values[name] = value
                else:
                    values[name] = type(default)(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for {name}: {value!r} ({e})") from e
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path: Optional[Union[str, Path]] = None) -> ReasonTreeConfig:
    """Load settings from YAML, falling back to defaults.

    Args:
        path: Config file path; defaults to ``$REASONTREE_CONFIG`` when unset.

    Returns:
        The merged configuration.
    """
    if path is None:
        env_path = os.getenv("REASONTREE_CONFIG", "").strip()
        path = env_path or None
    if path is None:
        return ReasonTreeConfig()

    config_path = Path(path)
    if not config_path.exists():
        logger.info(f"[Config] {config_path} not found, using defaults")
        return ReasonTreeConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    config = ReasonTreeConfig.from_dict(data)
    logger.debug(f"[Config] Loaded settings from {config_path}")
    return config
