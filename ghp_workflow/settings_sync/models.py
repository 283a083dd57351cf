"""Models for settings shared between the ghp CLI config and the editor configuration."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class SyncableSettingKey(str, Enum):
    """Enum for settings that both the CLI config and the editor configuration can hold."""

    MAIN_BRANCH = "mainBranch"
    BRANCH_PATTERN = "branchPattern"
    START_WORKING_STATUS = "startWorkingStatus"
    DONE_STATUS = "doneStatus"


SYNCABLE_KEYS: tuple[SyncableSettingKey, ...] = tuple(SyncableSettingKey)
"""Canonical order in which syncable settings are compared and reported."""

SETTING_DISPLAY_NAMES: Mapping[SyncableSettingKey, str] = MappingProxyType(
    {
        SyncableSettingKey.MAIN_BRANCH: "Main Branch",
        SyncableSettingKey.BRANCH_PATTERN: "Branch Name Pattern",
        SyncableSettingKey.START_WORKING_STATUS: "Start Working Status",
        SyncableSettingKey.DONE_STATUS: "Done Status",
    }
)

CLI_TO_EDITOR_KEY_MAP: Mapping[SyncableSettingKey, str] = MappingProxyType(
    {
        SyncableSettingKey.MAIN_BRANCH: "mainBranch",
        SyncableSettingKey.BRANCH_PATTERN: "branchNamePattern",
        SyncableSettingKey.START_WORKING_STATUS: "startWorkingStatus",
        SyncableSettingKey.DONE_STATUS: "doneStatus",
    }
)

EDITOR_TO_CLI_KEY_MAP: Mapping[str, SyncableSettingKey] = MappingProxyType({editor_key: key for key, editor_key in CLI_TO_EDITOR_KEY_MAP.items()})

SyncableSettings = Mapping[SyncableSettingKey, str | None]
"""Setting values keyed by canonical key. A missing key or a None value means not configured."""


class SettingSource(str, Enum):
    """Enum for the two configuration sources being reconciled."""

    CLI = "cli"
    EDITOR = "editor"


@dataclass(frozen=True)
class SettingValue:
    """A setting that has a single value, either in both sources or only in one."""

    key: SyncableSettingKey
    value: str


@dataclass(frozen=True)
class SettingConflict:
    """A setting configured in both sources with different values."""

    key: SyncableSettingKey
    display_name: str
    cli_value: str
    editor_value: str


@dataclass(frozen=True)
class SettingsDiff:
    """Classification of every syncable setting configured in at least one source."""

    matching: tuple[SettingValue, ...] = ()
    conflicts: tuple[SettingConflict, ...] = ()
    cli_only: tuple[SettingValue, ...] = ()
    editor_only: tuple[SettingValue, ...] = ()


class ResolutionChoice(Enum):
    """Enum for the ways a user can resolve a conflicting setting."""

    USE_CLI = "cli"
    USE_EDITOR = "editor"
    USE_CUSTOM = "custom"
    SKIP = "skip"


@dataclass(frozen=True)
class ConflictResolution:
    """The user's decision for a single conflicting setting.

    Only the custom choice carries a value. Use the ``use_cli``, ``use_editor``,
    ``use_custom`` and ``skip`` constructors rather than building this directly.
    """

    choice: ResolutionChoice
    value: str | None = None

    def __post_init__(self) -> None:
        """Ensures that only custom resolutions carry a value."""
        if self.choice is ResolutionChoice.USE_CUSTOM and self.value is None:
            raise ValueError("A custom resolution requires a value.")
        if self.choice is not ResolutionChoice.USE_CUSTOM and self.value is not None:
            raise ValueError(f"A {self.choice.value} resolution does not take a value.")


def use_cli() -> ConflictResolution:
    """Keep the CLI value and copy it into the editor configuration."""
    return ConflictResolution(ResolutionChoice.USE_CLI)


def use_editor() -> ConflictResolution:
    """Keep the editor value and copy it into the CLI config."""
    return ConflictResolution(ResolutionChoice.USE_EDITOR)


def use_custom(value: str) -> ConflictResolution:
    """Write a new value into both sources."""
    return ConflictResolution(ResolutionChoice.USE_CUSTOM, value)


def skip() -> ConflictResolution:
    """Leave both sources as they are."""
    return ConflictResolution(ResolutionChoice.SKIP)


ConflictChoices = Mapping[SyncableSettingKey | str, ConflictResolution]


@dataclass
class MergePatches:
    """Values to write into each source once conflicts have been resolved.

    Both patches are keyed by canonical setting key. Stores translate keys to
    their own naming when the patch is saved.
    """

    cli: dict[SyncableSettingKey, str] = field(default_factory=dict)
    editor: dict[SyncableSettingKey, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """Whether neither source would be modified."""
        return not self.cli and not self.editor
