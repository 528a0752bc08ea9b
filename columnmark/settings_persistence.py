"""Settings persistence for overflow highlighting preferences.

Settings are stored in an OS-appropriate JSON file, indexed by the
absolute path of the document they apply to. The entry under
DEFAULTS_KEY applies to every document that has no entry of its own.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .config import OverflowSettings
from .constants import ColumnmarkConstants
from .policy import is_valid_limit

logger = logging.getLogger(__name__)

DEFAULTS_KEY = "*"


class SettingsPersistence:
    """Manages persistent storage of per-document settings."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize settings persistence.

        Args:
            config_dir: Directory holding settings.json. Defaults to the
                platform user config directory for columnmark.
        """
        self._config_dir = Path(config_dir or platformdirs.user_config_dir("columnmark"))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_all_settings(self) -> Dict[str, Dict[str, Any]]:
        """Load all settings from disk.

        Returns:
            Mapping of document keys to their settings. Empty if the file
            is missing, unreadable or not a JSON object.
        """
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            self._settings_cache = {}
            return self._settings_cache

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def _save_all_settings(self, settings: Dict[str, Dict[str, Any]]) -> bool:
        """Write all settings atomically (temp file + rename).

        Args:
            settings: Mapping of document keys to their settings.

        Returns:
            True if the file was written, False otherwise.
        """
        self._ensure_config_dir()
        temp_file = self._settings_file.with_suffix('.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2, sort_keys=True)
            temp_file.replace(self._settings_file)
            self._settings_cache = settings
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                # Justification: cleanup of a stray temp file is best-effort
                pass
            return False

    @staticmethod
    def _key_for(document_path: str) -> Optional[str]:
        if document_path == DEFAULTS_KEY:
            return DEFAULTS_KEY
        try:
            return os.path.abspath(document_path)
        except (OSError, ValueError):
            logger.warning(f"Invalid document path: {document_path}")
            return None

    def load_settings(self, document_path: Optional[str]) -> Dict[str, Any]:
        """Load the settings stored for one document.

        Args:
            document_path: Path of the document, or DEFAULTS_KEY. None
                returns an empty dict.

        Returns:
            The valid stored settings; invalid entries are dropped with a
            warning.
        """
        if document_path is None:
            return {}
        key = self._key_for(document_path)
        if key is None:
            return {}
        doc_settings = self._load_all_settings().get(key, {})
        if not isinstance(doc_settings, dict):
            logger.warning(f"Settings for {key} are not a dict, ignoring")
            return {}
        valid = {}
        for name, value in doc_settings.items():
            if self.validate_setting(name, value):
                valid[name] = value
            else:
                logger.warning(f"Ignoring invalid setting {name}={value!r} for {key}")
        return valid

    def save_settings(self, document_path: Optional[str], settings: Dict[str, Any]) -> bool:
        """Merge `settings` into what is stored for the document.

        Args:
            document_path: Path of the document, or DEFAULTS_KEY.
            settings: Values to store; all must pass validate_setting.

        Returns:
            True if the settings were saved, False otherwise.
        """
        if document_path is None:
            return False
        key = self._key_for(document_path)
        if key is None:
            return False
        for name, value in settings.items():
            if not self.validate_setting(name, value):
                logger.warning(f"Refusing to save invalid setting {name}={value!r}")
                return False
        all_settings = dict(self._load_all_settings())
        merged = dict(all_settings.get(key) or {})
        merged.update(settings)
        all_settings[key] = merged
        return self._save_all_settings(all_settings)

    def load_overflow_settings(self, document_path: Optional[str],
                               base: Optional[OverflowSettings] = None) -> OverflowSettings:
        """Defaults entry, then the document's entry, layered over `base`."""
        settings = OverflowSettings.from_mapping(self.load_settings(DEFAULTS_KEY), base)
        if document_path is not None:
            settings = OverflowSettings.from_mapping(self.load_settings(document_path), settings)
        return settings

    def validate_setting(self, key: str, value: Any) -> bool:
        """Validate a setting value.

        Args:
            key: Setting name.
            value: Setting value to check.

        Returns:
            True if the value may be stored, False otherwise.
        """
        if value is None:
            return True  # None means "not set"

        if key == 'column_limit':
            return is_valid_limit(value)

        if key == 'include_comments':
            return isinstance(value, bool)

        if key == 'highlight_style':
            if not isinstance(value, dict):
                return False
            inherit = value.get('inherit')
            return inherit is None or inherit in ColumnmarkConstants.FACES

        # Unknown settings are considered valid (forward compatibility)
        return True

    def clear_cache(self) -> None:
        self._settings_cache = None


# Global instance
_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the global settings persistence instance."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
