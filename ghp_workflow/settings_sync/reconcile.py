"""Reconcile syncable settings between the ghp CLI config and the editor configuration."""

from typing import Iterable

import structlog

from ghp_workflow.settings_sync.exceptions import SettingNotOneSidedError, UnknownSettingKeyError
from ghp_workflow.settings_sync.models import (
    SETTING_DISPLAY_NAMES,
    SYNCABLE_KEYS,
    ConflictChoices,
    ConflictResolution,
    MergePatches,
    ResolutionChoice,
    SettingConflict,
    SettingsDiff,
    SettingSource,
    SettingValue,
    SyncableSettingKey,
    SyncableSettings,
    skip,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def coerce_setting_key(key: object) -> SyncableSettingKey:
    """Converts a key or its string name into a canonical syncable setting key.

    Raises:
        UnknownSettingKeyError: If the key is not a syncable setting.
    """
    if isinstance(key, SyncableSettingKey):
        return key
    try:
        return SyncableSettingKey(key)
    except ValueError as exc:
        raise UnknownSettingKeyError(key) from exc


def normalize_settings(settings: SyncableSettings) -> dict[SyncableSettingKey, str | None]:
    """Re-keys a settings mapping by canonical key so that string and enum keys compare alike."""
    return {coerce_setting_key(key): value for key, value in settings.items()}


def compute_settings_diff(
    cli_settings: SyncableSettings,
    editor_settings: SyncableSettings,
    keys: Iterable[SyncableSettingKey | str] = SYNCABLE_KEYS,
) -> SettingsDiff:
    """Classifies each syncable setting as matching, conflicting, or configured in only one source.

    Settings configured in neither source are left out of the diff entirely.
    Values are compared as exact strings with no normalization.

    Args:
        cli_settings: Settings read from the ghp CLI config.
        editor_settings: Settings read from the editor configuration.
        keys: The setting keys to compare, in reporting order. Repeated keys are compared once.

    Raises:
        UnknownSettingKeyError: If ``keys`` or either source contains a key that is not syncable.

    Returns:
        SettingsDiff: The classification of every setting present in at least one source.
    """
    cli_values = normalize_settings(cli_settings)
    editor_values = normalize_settings(editor_settings)
    matching: list[SettingValue] = []
    conflicts: list[SettingConflict] = []
    cli_only: list[SettingValue] = []
    editor_only: list[SettingValue] = []

    for key in dict.fromkeys(coerce_setting_key(raw_key) for raw_key in keys):
        cli_value = cli_values.get(key)
        editor_value = editor_values.get(key)

        if cli_value is None and editor_value is None:
            continue
        elif cli_value is None:
            editor_only.append(SettingValue(key=key, value=editor_value))  # type: ignore[arg-type]
        elif editor_value is None:
            cli_only.append(SettingValue(key=key, value=cli_value))
        elif cli_value == editor_value:
            matching.append(SettingValue(key=key, value=cli_value))
        else:
            conflicts.append(
                SettingConflict(
                    key=key,
                    display_name=SETTING_DISPLAY_NAMES[key],
                    cli_value=cli_value,
                    editor_value=editor_value,
                )
            )

    return SettingsDiff(
        matching=tuple(matching),
        conflicts=tuple(conflicts),
        cli_only=tuple(cli_only),
        editor_only=tuple(editor_only),
    )


def has_differences(diff: SettingsDiff) -> bool:
    """Whether the two sources disagree on anything (conflicts or one-sided settings)."""
    return bool(diff.conflicts or diff.cli_only or diff.editor_only)


def resolve_conflicts(diff: SettingsDiff, choices: ConflictChoices, dry_run: bool = False) -> MergePatches:
    """Applies the user's resolutions to the conflicting settings of a diff.

    Conflicts without a resolution are skipped. One-sided settings are not
    included; see ``apply_one_sided_choices``. Nothing is written regardless
    of ``dry_run``; the flag only marks the patches as a preview in the logs.

    Args:
        diff: The diff whose conflicts are being resolved.
        choices: The resolution for each conflicting setting key.
        dry_run: Whether the caller is only previewing the result.

    Raises:
        UnknownSettingKeyError: If ``choices`` contains a key that is not syncable.

    Returns:
        MergePatches: The values to write into the CLI config and the editor configuration.
    """
    resolutions: dict[SyncableSettingKey, ConflictResolution] = {coerce_setting_key(key): resolution for key, resolution in choices.items()}
    patches = MergePatches()

    for conflict in diff.conflicts:
        resolution = resolutions.get(conflict.key, skip())
        if resolution.choice is ResolutionChoice.USE_CLI:
            patches.editor[conflict.key] = conflict.cli_value
        elif resolution.choice is ResolutionChoice.USE_EDITOR:
            patches.cli[conflict.key] = conflict.editor_value
        elif resolution.choice is ResolutionChoice.USE_CUSTOM:
            patches.cli[conflict.key] = resolution.value  # type: ignore[assignment]
            patches.editor[conflict.key] = resolution.value  # type: ignore[assignment]
        logger.debug("Resolved setting conflict", key=conflict.key.value, choice=resolution.choice.value)

    if dry_run:
        logger.info(
            "Dry run - computed settings patches without applying them",
            cli_keys=[key.value for key in patches.cli],
            editor_keys=[key.value for key in patches.editor],
        )
    return patches


def apply_one_sided_choices(
    patches: MergePatches,
    diff: SettingsDiff,
    sync_cli_only: Iterable[SyncableSettingKey | str] = (),
    sync_editor_only: Iterable[SyncableSettingKey | str] = (),
) -> MergePatches:
    """Adds approved one-sided settings to a copy of the resolved patches.

    A setting found only in the CLI config is copied into the editor patch and
    vice versa.

    Raises:
        UnknownSettingKeyError: If an approved key is not syncable.
        SettingNotOneSidedError: If an approved key is not one-sided in the given direction.
    """
    cli_only = {entry.key: entry.value for entry in diff.cli_only}
    editor_only = {entry.key: entry.value for entry in diff.editor_only}
    merged = MergePatches(cli=dict(patches.cli), editor=dict(patches.editor))

    for raw_key in sync_cli_only:
        key = coerce_setting_key(raw_key)
        if key not in cli_only:
            raise SettingNotOneSidedError(key.value, SettingSource.CLI.value)
        merged.editor[key] = cli_only[key]

    for raw_key in sync_editor_only:
        key = coerce_setting_key(raw_key)
        if key not in editor_only:
            raise SettingNotOneSidedError(key.value, SettingSource.EDITOR.value)
        merged.cli[key] = editor_only[key]

    return merged


def _pluralize(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def get_diff_summary(diff: SettingsDiff) -> str:
    """Summarizes a diff in one line, e.g. '1 conflict, 2 only in CLI, 0 only in editor, 1 matching'."""
    return ", ".join(
        [
            _pluralize(len(diff.conflicts), "conflict", "conflicts"),
            f"{len(diff.cli_only)} only in CLI",
            f"{len(diff.editor_only)} only in editor",
            f"{len(diff.matching)} matching",
        ]
    )
