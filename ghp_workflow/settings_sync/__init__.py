"""Reconciliation of settings shared by the ghp CLI and the editor extension."""

from .models import (
    SYNCABLE_KEYS,
    ConflictResolution,
    MergePatches,
    ResolutionChoice,
    SettingsDiff,
    SyncableSettingKey,
    skip,
    use_cli,
    use_custom,
    use_editor,
)
from .reconcile import (
    apply_one_sided_choices,
    compute_settings_diff,
    get_diff_summary,
    has_differences,
    resolve_conflicts,
)

__all__ = [
    "SYNCABLE_KEYS",
    "ConflictResolution",
    "MergePatches",
    "ResolutionChoice",
    "SettingsDiff",
    "SyncableSettingKey",
    "apply_one_sided_choices",
    "compute_settings_diff",
    "get_diff_summary",
    "has_differences",
    "resolve_conflicts",
    "skip",
    "use_cli",
    "use_custom",
    "use_editor",
]
