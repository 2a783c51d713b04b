"""
mawmakepkg - Configuration Manager
Loads the helper's settings from JSON on top of built-in defaults.
The file is read as root; the command line only ever reads DEFAULT_CONFIG_PATH.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "/etc/mawmakepkg.json"

DEFAULTS: dict[str, dict[str, Any]] = {
    "general": {
        "log_level": "INFO",
    },
    "identity": {
        "env_var": "SUDO_USER",
    },
    "build": {
        "shell": "bash",
        "tool": "makepkg",
        "pacman_override": "maw",
    },
}


class Config:
    """mawmakepkg configuration: built-in defaults overlaid with a JSON file."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = config_path
        self._data: dict[str, Any] = {}
        self.load()

    def load(self, path: str | None = None) -> bool:
        """Load configuration from a JSON file, merged over DEFAULTS."""
        target = path or self.config_path
        self._data = copy.deepcopy(DEFAULTS)
        try:
            with open(target) as f:
                loaded = json.load(f)
        except FileNotFoundError:
            logger.debug(f"Config file not found at {target}, using defaults.")
            return False
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {target}: {e}")
            return False

        if not isinstance(loaded, dict):
            logger.error(f"Config file {target} must hold a JSON object, using defaults.")
            return False

        for section, values in loaded.items():
            if isinstance(values, dict):
                self._data.setdefault(section, {}).update(values)
            else:
                logger.warning(f"Ignoring config section {section!r}: not an object")
        logger.debug(f"Config loaded from {target}")
        return True

    def get(self, section: str, key: str, fallback=None):
        """Get a value from the config with an optional fallback."""
        return self._data.get(section, {}).get(key, fallback)

    def set(self, section: str, key: str, value):
        """Set a value in the config."""
        if section not in self._data:
            self._data[section] = {}
        self._data[section][key] = value

    def get_section(self, section: str) -> dict:
        """Return an entire section as a dict."""
        return self._data.get(section, {})

    def as_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = copy.deepcopy(self._data)
        return result
