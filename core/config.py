"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/config.py
Version:        1.0.0
Description:    Manages application configuration using QSettings. Holds the
                frame hider settings (hide flag, project-root restriction,
                library patterns) and standardizes paths for configuration
                and data across platforms (XDG standards on Linux).
------------------------------------------------------------------------------
"""

import json
import os
from pathlib import Path
from typing import Any, List, Optional

from PyQt6.QtCore import QSettings, QStandardPaths

from core.models.settings import FrameHiderSettings, DEFAULT_LIBRARY_PATTERNS


class AppConfig:
    """
    Manages application configuration using QSettings.
    Singleton-like usage via class methods or single instance.
    """

    KEY_HIDE_LIBRARY_FRAMES: str = "hide_library_frames"
    KEY_RESTRICT_TO_PROJECT: str = "restrict_to_project_root"
    KEY_LIBRARY_PATTERNS: str = "library_patterns"
    KEY_PROJECT_ROOT: str = "root"
    KEY_LOG_LEVEL: str = "log_level"
    KEY_LOG_COMPONENTS: str = "log_components"

    GROUP_FRAME_HIDER: str = "FrameHider"

    APP_ID: str = "stacksnack"
    _active_profile: Optional[str] = None

    def __init__(self, profile: Optional[str] = None) -> None:
        """
        Initializes the configuration manager.

        Args:
            profile: Optional profile name (e.g. 'dev', 'test').
                    If provided, all paths and settings are isolated (e.g. stacksnack-dev).
        """
        # If no profile provided, use the last active one (Global Singleton-like)
        if profile is None:
            profile = AppConfig._active_profile
        else:
            AppConfig._active_profile = profile

        self.profile = profile
        self.active_id = self.APP_ID
        if profile:
            self.active_id = f"{self.APP_ID}-{profile}"

        self.settings = QSettings(self.active_id, self.active_id)

    def get_config_dir(self) -> Path:
        """
        Returns the path to the application configuration directory.
        Forces a flat structure: ~/.config/stacksnack[-profile]/
        """
        base_path = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.ConfigLocation)
        config_dir = Path(base_path) / self.active_id
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    def get_data_dir(self) -> Path:
        """
        Returns the path to the application data directory.
        Forces a flat structure: ~/.local/share/stacksnack[-profile]/
        """
        base_path = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.GenericDataLocation)
        data_dir = Path(base_path) / self.active_id
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def _get_setting(self, group: str, key: str, default: Any = None) -> Any:
        """
        Helper to retrieve a setting value from a specific group.

        Args:
            group: The configuration group name.
            key: The setting key.
            default: The default value if not found.

        Returns:
            The retrieved value or default.
        """
        if group:
            self.settings.beginGroup(group)
        val = self.settings.value(key, default)
        if group:
            self.settings.endGroup()
        return val

    def _set_setting(self, group: str, key: str, value: Any) -> None:
        """
        Helper to save a setting value into a specific group.

        Args:
            group: The configuration group name.
            key: The setting key.
            value: The value to save.
        """
        if isinstance(value, str):
            value = value.strip()

        if group:
            self.settings.beginGroup(group)
        self.settings.setValue(key, value)
        if group:
            self.settings.endGroup()

    def _get_bool(self, group: str, key: str, default: bool) -> bool:
        # INI backends hand booleans back as "true"/"false" strings
        val = self._get_setting(group, key, default)
        if isinstance(val, str):
            return val.strip().lower() in ("1", "true", "yes", "on")
        return bool(val)

    def get_hide_library_frames(self) -> bool:
        """Retrieves whether library frames are collapsed in the call stack."""
        return self._get_bool(self.GROUP_FRAME_HIDER, self.KEY_HIDE_LIBRARY_FRAMES, False)

    def set_hide_library_frames(self, enabled: bool) -> None:
        """Saves whether library frames are collapsed in the call stack."""
        self._set_setting(self.GROUP_FRAME_HIDER, self.KEY_HIDE_LIBRARY_FRAMES, bool(enabled))

    def get_restrict_to_project_root(self) -> bool:
        """
        Retrieves whether frames outside the project root count as library frames.

        Returns:
            True if only frames under the project root stay visible.
        """
        return self._get_bool(self.GROUP_FRAME_HIDER, self.KEY_RESTRICT_TO_PROJECT, True)

    def set_restrict_to_project_root(self, enabled: bool) -> None:
        """
        Saves whether frames outside the project root count as library frames.

        Args:
            enabled: The new flag value.
        """
        self._set_setting(self.GROUP_FRAME_HIDER, self.KEY_RESTRICT_TO_PROJECT, bool(enabled))

    def get_library_patterns(self) -> List[str]:
        """
        Retrieves the ordered list of library path patterns.

        Returns:
            The list of patterns, defaults if nothing was stored yet.
        """
        raw = self._get_setting(self.GROUP_FRAME_HIDER, self.KEY_LIBRARY_PATTERNS, None)
        if raw is None:
            return list(DEFAULT_LIBRARY_PATTERNS)
        try:
            patterns = json.loads(str(raw))
        except json.JSONDecodeError:
            return list(DEFAULT_LIBRARY_PATTERNS)
        if not isinstance(patterns, list):
            return list(DEFAULT_LIBRARY_PATTERNS)
        return FrameHiderSettings(library_patterns=patterns).library_patterns

    def set_library_patterns(self, patterns: List[str]) -> None:
        """
        Saves the library path patterns. Blank and duplicate entries are dropped.

        Args:
            patterns: The ordered list of patterns.
        """
        normalized = FrameHiderSettings(library_patterns=patterns).library_patterns
        self._set_setting(self.GROUP_FRAME_HIDER, self.KEY_LIBRARY_PATTERNS, json.dumps(normalized))

    def get_project_root(self) -> str:
        """Retrieves the project root directory, defaulting to the working directory."""
        val = str(self._get_setting("Project", self.KEY_PROJECT_ROOT, "") or "")
        return val if val else os.getcwd()

    def set_project_root(self, path: str) -> None:
        """Saves the project root directory."""
        self._set_setting("Project", self.KEY_PROJECT_ROOT, path)

    def get_frame_hider_settings(self) -> FrameHiderSettings:
        """
        Builds an immutable snapshot of everything the frame filter reads.

        Returns:
            The FrameHiderSettings snapshot.
        """
        return FrameHiderSettings(
            hide_enabled=self.get_hide_library_frames(),
            restrict_to_project_root=self.get_restrict_to_project_root(),
            library_patterns=self.get_library_patterns(),
            project_root=self.get_project_root(),
        )

    def get_log_level(self) -> str:
        """Retrieves the global log level."""
        return str(self._get_setting("Logging", self.KEY_LOG_LEVEL, "WARNING"))

    def set_log_level(self, level: str) -> None:
        """Saves the global log level."""
        self._set_setting("Logging", self.KEY_LOG_LEVEL, level.upper())

    def get_log_components(self) -> dict:
        """Retrieves a dictionary of component-specific log levels."""
        raw = str(self._get_setting("Logging", self.KEY_LOG_COMPONENTS, "{}"))
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return {}

    def set_log_components(self, components: dict) -> None:
        """Saves a dictionary of component-specific log levels."""
        self._set_setting("Logging", self.KEY_LOG_COMPONENTS, json.dumps(components))

    def get_log_file_path(self) -> Path:
        """Returns the absolute path to the log file."""
        return self.get_data_dir() / "app.log"
