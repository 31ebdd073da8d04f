# SPDX-License-Identifier: GPL-3.0-or-later
# Settings management

"""Settings management module for persisting application preferences."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from gi.repository import GLib

from .constants import APP_DIR_NAME, DEFAULT_REFRESH_RATE

logger = logging.getLogger(__name__)

SettingValue = Union[int, float, bool, str, list]


def default_config_dir() -> Path:
    """Return the per-user configuration directory of the application."""
    return Path(GLib.get_user_config_dir()) / APP_DIR_NAME


class Settings:
    """Application settings manager.

    Handles loading, saving, and managing application settings.
    Settings are stored in JSON format in the user's config directory.
    """

    DEFAULTS: Dict[str, SettingValue] = {
        "refreshrate": DEFAULT_REFRESH_RATE,  # seconds
        "provider": 0,  # see ProviderKind
        "tempformat": 0,  # 0 = Celsius, 1 = Fahrenheit
        "window_width": 480,
        "window_height": 420,
    }

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._settings: Dict[str, SettingValue] = dict(self.DEFAULTS)
        self._config_dir = config_dir if config_dir is not None else default_config_dir()
        self._config_file = self._config_dir / "settings.json"
        self.load()

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def load(self) -> None:
        """Load settings from file.

        If the settings file doesn't exist or is invalid, defaults are used.
        """
        try:
            if self._config_file.exists():
                with open(self._config_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                    self._settings.update(loaded)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load settings: %s", e)

    def save(self) -> None:
        """Save settings to file.

        Creates the config directory if it doesn't exist.
        """
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=2)
        except OSError as e:
            logger.warning("Could not save settings: %s", e)

    def get(self, key: str, default: Optional[SettingValue] = None) -> Optional[SettingValue]:
        """Get a setting value.

        Args:
            key: The setting key to retrieve.
            default: Default value if key is not found (falls back to DEFAULTS).

        Returns:
            The setting value, or None for an unknown key without default.
        """
        if default is not None:
            return self._settings.get(key, default)
        return self._settings.get(key, self.DEFAULTS.get(key))

    def set(self, key: str, value: SettingValue) -> None:
        """Set a setting value and save to disk.

        Args:
            key: The setting key to set.
            value: The value to store.
        """
        self._settings[key] = value
        self.save()

    def reset(self) -> None:
        """Reset all settings to defaults and save to disk."""
        self._settings = dict(self.DEFAULTS)
        self.save()
