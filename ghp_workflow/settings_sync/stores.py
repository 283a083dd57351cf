"""Read and merge-write syncable settings in the ghp CLI config file and the editor settings file."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import json5
import structlog

from ghp_workflow.settings_sync.exceptions import SettingsStoreError
from ghp_workflow.settings_sync.models import (
    CLI_TO_EDITOR_KEY_MAP,
    SYNCABLE_KEYS,
    SyncableSettingKey,
)
from ghp_workflow.settings_sync.reconcile import normalize_settings
from ghp_workflow.utils.constants import (
    DEFAULT_CLI_CONFIG_PATH,
    DEFAULT_EDITOR_SETTINGS_PATH,
    EDITOR_SETTINGS_SECTION,
    WORKSPACE_SETTINGS_RELATIVE_PATH,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ConfigurationTarget(str, Enum):
    """Enum for the editor configuration scope that settings are written to."""

    GLOBAL = "global"
    WORKSPACE = "workspace"


def read_json_object(path: Path, allow_comments: bool = False) -> dict[str, Any]:
    """Loads a JSON object from a file, returning an empty object if the file does not exist.

    Args:
        path: The file to read.
        allow_comments: Accept JSON with comments and trailing commas, as editor settings files use.

    Raises:
        SettingsStoreError: If the file is not valid JSON or does not hold an object.
    """
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as exc:
        raise SettingsStoreError(path, str(exc)) from exc
    if not content.strip():
        return {}
    try:
        data = json5.loads(content) if allow_comments else json.loads(content)
    except ValueError as exc:
        raise SettingsStoreError(path, f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise SettingsStoreError(path, "expected a JSON object at the top level")
    return data


def write_json_object(path: Path, data: dict[str, Any]) -> None:
    """Writes a JSON object to a file, creating parent directories as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
    except OSError as exc:
        raise SettingsStoreError(path, str(exc)) from exc


class CliConfigStore:
    """Syncable settings in the ghp CLI user config file, stored under their CLI names."""

    def __init__(self, path: Path = DEFAULT_CLI_CONFIG_PATH) -> None:
        """Initialize the store with the path of the CLI config file."""
        self.path = path

    def load(self) -> dict[SyncableSettingKey, str]:
        """Returns every syncable setting that has a non-empty string value."""
        config = read_json_object(self.path)
        settings: dict[SyncableSettingKey, str] = {}
        for key in SYNCABLE_KEYS:
            value = config.get(key.value)
            if isinstance(value, str) and value != "":
                settings[key] = value
        logger.debug("Loaded CLI settings", path=str(self.path), keys=[key.value for key in settings])
        return settings

    def save(self, settings: Mapping[SyncableSettingKey | str, str | None]) -> None:
        """Merges the given settings into the config file, preserving every other key."""
        config = read_json_object(self.path)
        written: list[str] = []
        for key, value in normalize_settings(settings).items():
            if value is None:
                continue
            config[key.value] = value
            written.append(key.value)
        write_json_object(self.path, config)
        logger.info("Wrote CLI settings", path=str(self.path), keys=sorted(written))


class EditorSettingsStore:
    """Syncable settings in an editor settings file, stored as dotted keys under a section.

    The editor reports unset string settings as empty strings, so empty values
    are treated as not configured. The file may contain comments and trailing
    commas; saving rewrites it as plain JSON, so comments are not preserved.
    """

    def __init__(self, path: Path = DEFAULT_EDITOR_SETTINGS_PATH, section: str = EDITOR_SETTINGS_SECTION) -> None:
        """Initialize the store with the settings file path and the configuration section."""
        self.path = path
        self.section = section

    @classmethod
    def for_target(cls, target: ConfigurationTarget, workspace: Path | None = None) -> "EditorSettingsStore":
        """Build a store for the global user settings or for a workspace's settings."""
        if target is ConfigurationTarget.WORKSPACE:
            if workspace is None:
                raise ValueError("Workspace configuration target requires a workspace path.")
            return cls(workspace / WORKSPACE_SETTINGS_RELATIVE_PATH)
        return cls(DEFAULT_EDITOR_SETTINGS_PATH)

    def qualified_name(self, key: SyncableSettingKey) -> str:
        """Returns the dotted editor setting name for a syncable key."""
        return f"{self.section}.{CLI_TO_EDITOR_KEY_MAP[key]}"

    def load(self) -> dict[SyncableSettingKey, str]:
        """Returns every syncable setting that has a non-empty string value."""
        config = read_json_object(self.path, allow_comments=True)
        settings: dict[SyncableSettingKey, str] = {}
        for key in SYNCABLE_KEYS:
            value = config.get(self.qualified_name(key))
            if isinstance(value, str) and value != "":
                settings[key] = value
        logger.debug("Loaded editor settings", path=str(self.path), keys=[key.value for key in settings])
        return settings

    def save(self, settings: Mapping[SyncableSettingKey | str, str | None]) -> None:
        """Merges the given settings into the settings file under their editor names."""
        config = read_json_object(self.path, allow_comments=True)
        written: list[str] = []
        for key, value in normalize_settings(settings).items():
            if value is None:
                continue
            name = self.qualified_name(key)
            config[name] = value
            written.append(name)
        write_json_object(self.path, config)
        logger.info("Wrote editor settings", path=str(self.path), keys=sorted(written))
