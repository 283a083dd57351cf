"""Orchestrates an interactive settings sync between the ghp CLI config and the editor configuration."""

from enum import Enum
from typing import Mapping, Protocol

import structlog
import typer

from ghp_workflow.settings_sync.exceptions import SettingsStoreError
from ghp_workflow.settings_sync.models import (
    SETTING_DISPLAY_NAMES,
    ConflictResolution,
    MergePatches,
    SettingConflict,
    SettingsDiff,
    SettingSource,
    SettingValue,
    SyncableSettingKey,
    skip,
    use_cli,
    use_custom,
    use_editor,
)
from ghp_workflow.settings_sync.reconcile import (
    apply_one_sided_choices,
    compute_settings_diff,
    get_diff_summary,
    has_differences,
    resolve_conflicts,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class SettingsStore(Protocol):
    """Protocol for a configuration source that syncable settings are read from and written to."""

    def load(self) -> dict[SyncableSettingKey, str]: ...

    def save(self, settings: Mapping[SyncableSettingKey | str, str | None]) -> None: ...


class SyncPrompter(Protocol):
    """Protocol for collecting the user's decisions during a settings sync.

    Every method returns None when the user cancels the sync.
    """

    def confirm_review(self, summary: str) -> bool | None: ...

    def choose_resolution(self, conflict: SettingConflict) -> ConflictResolution | None: ...

    def confirm_one_sided(self, entry: SettingValue, source: SettingSource) -> bool | None: ...

    def confirm_apply(self, patches: MergePatches) -> bool | None: ...


class SettingsSyncStatus(str, Enum):
    """Enum for the outcome of a settings sync."""

    IN_SYNC = "in_sync"
    NOTHING_CONFIGURED = "nothing_configured"
    CANCELLED = "cancelled"
    NO_CHANGES = "no_changes"
    DRY_RUN = "dry_run"
    APPLIED = "applied"
    PARTIALLY_FAILED = "partially_failed"


class SettingsSyncResult:
    """Contains the results of the settings sync workflow."""

    def __init__(
        self,
        status: SettingsSyncStatus,
        diff: SettingsDiff,
        patches: MergePatches | None = None,
        errors: dict[SettingSource, str] | None = None,
    ) -> None:
        """Initialize the result with the outcome, the computed diff, the patches, and any write errors."""
        self.status = status
        self.diff = diff
        self.patches = patches or MergePatches()
        self.errors = errors or {}


def describe_patches(patches: MergePatches) -> str:
    """Describes which settings each source would receive, e.g. 'CLI: Main Branch and editor: Done Status'."""
    changes: list[str] = []
    if patches.cli:
        changes.append("CLI: " + ", ".join(SETTING_DISPLAY_NAMES[key] for key in patches.cli))
    if patches.editor:
        changes.append("editor: " + ", ".join(SETTING_DISPLAY_NAMES[key] for key in patches.editor))
    return " and ".join(changes)


def run_settings_sync(
    cli_store: SettingsStore,
    editor_store: SettingsStore,
    prompter: SyncPrompter,
    dry_run: bool = False,
) -> SettingsSyncResult:
    """Run the settings sync workflow: diff both sources, collect decisions, and write the result.

    Conflicts are resolved one by one through the prompter, then every setting
    configured in only one source is offered for copying to the other. Nothing
    is written when ``dry_run`` is set or the user declines the final
    confirmation. A failed write to one source does not prevent the write to
    the other; the failure is reported in the result.
    """
    cli_settings = cli_store.load()
    editor_settings = editor_store.load()
    diff = compute_settings_diff(cli_settings, editor_settings)

    if not has_differences(diff):
        status = SettingsSyncStatus.IN_SYNC if diff.matching else SettingsSyncStatus.NOTHING_CONFIGURED
        logger.info("No settings differences found", status=status.value, matching=len(diff.matching))
        return SettingsSyncResult(status, diff)

    summary = get_diff_summary(diff)
    logger.info("Settings differ between CLI and editor", summary=summary)
    if not prompter.confirm_review(summary):
        return SettingsSyncResult(SettingsSyncStatus.CANCELLED, diff)

    choices: dict[SyncableSettingKey, ConflictResolution] = {}
    for conflict in diff.conflicts:
        resolution = prompter.choose_resolution(conflict)
        if resolution is None:
            return SettingsSyncResult(SettingsSyncStatus.CANCELLED, diff)
        choices[conflict.key] = resolution

    sync_cli_only: list[SyncableSettingKey] = []
    for entry in diff.cli_only:
        approved = prompter.confirm_one_sided(entry, SettingSource.CLI)
        if approved is None:
            return SettingsSyncResult(SettingsSyncStatus.CANCELLED, diff)
        if approved:
            sync_cli_only.append(entry.key)

    sync_editor_only: list[SyncableSettingKey] = []
    for entry in diff.editor_only:
        approved = prompter.confirm_one_sided(entry, SettingSource.EDITOR)
        if approved is None:
            return SettingsSyncResult(SettingsSyncStatus.CANCELLED, diff)
        if approved:
            sync_editor_only.append(entry.key)

    patches = resolve_conflicts(diff, choices, dry_run=dry_run)
    patches = apply_one_sided_choices(patches, diff, sync_cli_only=sync_cli_only, sync_editor_only=sync_editor_only)

    if patches.is_empty():
        return SettingsSyncResult(SettingsSyncStatus.NO_CHANGES, diff, patches)
    if dry_run:
        return SettingsSyncResult(SettingsSyncStatus.DRY_RUN, diff, patches)
    if not prompter.confirm_apply(patches):
        return SettingsSyncResult(SettingsSyncStatus.CANCELLED, diff, patches)

    errors: dict[SettingSource, str] = {}
    for source, store, patch in (
        (SettingSource.CLI, cli_store, patches.cli),
        (SettingSource.EDITOR, editor_store, patches.editor),
    ):
        if not patch:
            continue
        try:
            store.save(patch)
        except SettingsStoreError as exc:
            logger.error("Failed to write settings", source=source.value, error=str(exc))
            errors[source] = str(exc)

    status = SettingsSyncStatus.PARTIALLY_FAILED if errors else SettingsSyncStatus.APPLIED
    return SettingsSyncResult(status, diff, patches, errors)


class TyperSyncPrompter:
    """Collects sync decisions from the terminal.

    Aborting a prompt (Ctrl+C or end of input) cancels the sync.
    """

    def confirm_review(self, summary: str) -> bool | None:
        """Ask whether to review the differences."""
        return self._confirm(f"Settings differ between CLI and editor: {summary}. Review & sync?")

    def choose_resolution(self, conflict: SettingConflict) -> ConflictResolution | None:
        """Ask which value should win for a conflicting setting."""
        typer.echo(f"{conflict.display_name}:")
        typer.echo(f'  [c] CLI: "{conflict.cli_value}" (use CLI value, update editor)')
        typer.echo(f'  [e] Editor: "{conflict.editor_value}" (use editor value, update CLI)')
        typer.echo("  [n] Enter custom value (use a new value for both)")
        typer.echo("  [s] Skip (keep both values as-is)")
        try:
            while True:
                answer = typer.prompt("Choose which value to use [c/e/n/s]", default="s").strip().lower()
                if answer == "c":
                    return use_cli()
                if answer == "e":
                    return use_editor()
                if answer == "s":
                    return skip()
                if answer == "n":
                    custom_value = typer.prompt(f"Enter new value for {conflict.display_name}", default=conflict.editor_value)
                    return use_custom(custom_value)
                typer.echo(f"Unrecognized choice '{answer}'", err=True)
        except typer.Abort:
            return None

    def confirm_one_sided(self, entry: SettingValue, source: SettingSource) -> bool | None:
        """Ask whether a setting configured on one side should be copied to the other."""
        if source is SettingSource.CLI:
            question = f'{SETTING_DISPLAY_NAMES[entry.key]}: "{entry.value}" exists only in CLI. Sync to editor?'
        else:
            question = f'{SETTING_DISPLAY_NAMES[entry.key]}: "{entry.value}" exists only in editor. Sync to CLI?'
        return self._confirm(question)

    def confirm_apply(self, patches: MergePatches) -> bool | None:
        """Ask for final confirmation before writing."""
        return self._confirm(f"Apply changes to {describe_patches(patches)}?")

    @staticmethod
    def _confirm(question: str) -> bool | None:
        try:
            return typer.confirm(question, default=False)
        except typer.Abort:
            return None
