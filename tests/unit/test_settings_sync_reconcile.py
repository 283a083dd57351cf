"""Unit tests for the settings_sync.reconcile module."""

import logging

import pytest

from ghp_workflow.settings_sync.exceptions import SettingNotOneSidedError, UnknownSettingKeyError
from ghp_workflow.settings_sync.models import (
    CLI_TO_EDITOR_KEY_MAP,
    EDITOR_TO_CLI_KEY_MAP,
    SETTING_DISPLAY_NAMES,
    SYNCABLE_KEYS,
    ConflictResolution,
    MergePatches,
    ResolutionChoice,
    SettingConflict,
    SettingsDiff,
    SettingValue,
    SyncableSettingKey,
    skip,
    use_cli,
    use_custom,
    use_editor,
)
from ghp_workflow.settings_sync.reconcile import (
    apply_one_sided_choices,
    coerce_setting_key,
    compute_settings_diff,
    get_diff_summary,
    has_differences,
    resolve_conflicts,
)

MAIN = SyncableSettingKey.MAIN_BRANCH
PATTERN = SyncableSettingKey.BRANCH_PATTERN
START = SyncableSettingKey.START_WORKING_STATUS
DONE = SyncableSettingKey.DONE_STATUS


def diff_keys(diff: SettingsDiff) -> list[set[SyncableSettingKey]]:
    """Return the key set of each diff category."""
    return [
        {entry.key for entry in diff.matching},
        {conflict.key for conflict in diff.conflicts},
        {entry.key for entry in diff.cli_only},
        {entry.key for entry in diff.editor_only},
    ]


class TestKeyTables:
    """Tests for the static key translation tables."""

    def test_key_maps_are_a_bijection_over_syncable_keys(self) -> None:
        """Every syncable key translates to a unique editor name and back."""
        assert set(CLI_TO_EDITOR_KEY_MAP) == set(SYNCABLE_KEYS)
        assert len(set(CLI_TO_EDITOR_KEY_MAP.values())) == len(SYNCABLE_KEYS)
        for key in SYNCABLE_KEYS:
            assert EDITOR_TO_CLI_KEY_MAP[CLI_TO_EDITOR_KEY_MAP[key]] is key

    def test_every_key_has_a_display_name(self) -> None:
        """Every syncable key has a display name."""
        assert set(SETTING_DISPLAY_NAMES) == set(SYNCABLE_KEYS)

    def test_tables_are_read_only(self) -> None:
        """The tables cannot be modified at runtime."""
        with pytest.raises(TypeError):
            CLI_TO_EDITOR_KEY_MAP[MAIN] = "other"  # type: ignore[index]


class TestCoerceSettingKey:
    """Tests for coerce_setting_key."""

    def test_accepts_enum_member(self) -> None:
        """Enum members pass through unchanged."""
        assert coerce_setting_key(MAIN) is MAIN

    def test_accepts_canonical_name(self) -> None:
        """Canonical string names are converted to enum members."""
        assert coerce_setting_key("branchPattern") is PATTERN

    @pytest.mark.parametrize("key", ["branchNamePattern", "MAIN_BRANCH", "", 42])
    def test_rejects_unknown_key(self, key: object) -> None:
        """Keys outside the syncable set fail fast."""
        with pytest.raises(UnknownSettingKeyError) as exc_info:
            coerce_setting_key(key)
        assert exc_info.value.key == key


class TestComputeSettingsDiff:
    """Tests for compute_settings_diff."""

    def test_classifies_each_key(self) -> None:
        """Keys are sorted into matching, conflicting and one-sided categories."""
        cli = {MAIN: "main", PATTERN: "{user}/{number}-{title}", START: "In Progress"}
        editor = {MAIN: "main", PATTERN: "{number}-{title}", DONE: "Done"}

        diff = compute_settings_diff(cli, editor)

        assert diff.matching == (SettingValue(key=MAIN, value="main"),)
        assert diff.conflicts == (
            SettingConflict(
                key=PATTERN,
                display_name="Branch Name Pattern",
                cli_value="{user}/{number}-{title}",
                editor_value="{number}-{title}",
            ),
        )
        assert diff.cli_only == (SettingValue(key=START, value="In Progress"),)
        assert diff.editor_only == (SettingValue(key=DONE, value="Done"),)

    def test_keys_absent_from_both_sources_are_omitted(self) -> None:
        """A key configured nowhere appears in no category."""
        diff = compute_settings_diff({MAIN: "main"}, {MAIN: "main"})
        assert diff_keys(diff) == [{MAIN}, set(), set(), set()]

    def test_none_values_count_as_absent(self) -> None:
        """A None value is treated as not configured."""
        diff = compute_settings_diff({MAIN: None, DONE: "Done"}, {MAIN: "main"})
        assert diff.editor_only == (SettingValue(key=MAIN, value="main"),)
        assert diff.cli_only == (SettingValue(key=DONE, value="Done"),)

    @pytest.mark.parametrize(
        "cli_value,editor_value",
        [
            ("main", "Main"),
            ("main", "main "),
            ("", "main"),
        ],
    )
    def test_values_are_compared_exactly(self, cli_value: str, editor_value: str) -> None:
        """Case and whitespace differences are conflicts; no normalization is applied."""
        diff = compute_settings_diff({MAIN: cli_value}, {MAIN: editor_value})
        assert [conflict.key for conflict in diff.conflicts] == [MAIN]
        assert diff.matching == ()

    def test_empty_string_values_match_each_other(self) -> None:
        """Two empty strings are present and equal."""
        diff = compute_settings_diff({MAIN: ""}, {MAIN: ""})
        assert diff.matching == (SettingValue(key=MAIN, value=""),)

    def test_empty_sources_produce_empty_diff(self) -> None:
        """Empty sources are valid input and produce an empty diff."""
        assert compute_settings_diff({}, {}) == SettingsDiff()

    def test_empty_key_set_produces_empty_diff(self) -> None:
        """An empty key set compares nothing."""
        assert compute_settings_diff({MAIN: "main"}, {MAIN: "master"}, keys=[]) == SettingsDiff()

    def test_key_subset_limits_comparison(self) -> None:
        """Only the requested keys are compared."""
        diff = compute_settings_diff({MAIN: "main", DONE: "Done"}, {MAIN: "master"}, keys=[DONE])
        assert diff_keys(diff) == [set(), set(), {DONE}, set()]

    def test_string_keys_are_accepted(self) -> None:
        """Sources and key sets may use canonical string names."""
        diff = compute_settings_diff({"mainBranch": "main"}, {"mainBranch": "master"}, keys=["mainBranch"])  # type: ignore[dict-item]
        assert diff.conflicts[0].key is MAIN

    def test_repeated_keys_are_compared_once(self) -> None:
        """A key listed twice, as a name and as a member, yields a single entry."""
        diff = compute_settings_diff(
            {"mainBranch": "main", DONE: "Done"},  # type: ignore[dict-item]
            {"mainBranch": "master"},  # type: ignore[dict-item]
            keys=["mainBranch", MAIN, DONE, "doneStatus"],
        )
        assert len(diff.conflicts) == 1
        assert [entry.key for entry in diff.cli_only] == [DONE]
        assert get_diff_summary(diff) == "1 conflict, 1 only in CLI, 0 only in editor, 0 matching"

    def test_unknown_key_in_key_set_raises(self) -> None:
        """A non-syncable key in the key set is a contract violation."""
        with pytest.raises(UnknownSettingKeyError):
            compute_settings_diff({}, {}, keys=["defaultProject"])

    def test_unknown_key_in_source_raises(self) -> None:
        """A non-syncable key in a source is a contract violation."""
        with pytest.raises(UnknownSettingKeyError):
            compute_settings_diff({"defaultProject": "x"}, {})  # type: ignore[dict-item]

    def test_categories_follow_canonical_key_order(self) -> None:
        """Entries are reported in the order of the key set."""
        cli = {DONE: "Done", MAIN: "main"}
        diff = compute_settings_diff(cli, {})
        assert [entry.key for entry in diff.cli_only] == [MAIN, DONE]

    @pytest.mark.parametrize(
        "cli,editor",
        [
            ({}, {}),
            ({MAIN: "main"}, {}),
            ({MAIN: "main", PATTERN: "a"}, {MAIN: "main", PATTERN: "b", START: "x"}),
            ({MAIN: "a", PATTERN: "b", START: "c", DONE: "d"}, {MAIN: "a", PATTERN: "x", START: "c"}),
        ],
    )
    def test_categories_partition_configured_keys(
        self, cli: dict[SyncableSettingKey, str], editor: dict[SyncableSettingKey, str]
    ) -> None:
        """Every configured key lands in exactly one category."""
        categories = diff_keys(compute_settings_diff(cli, editor))
        assert set().union(*categories) == set(cli) | set(editor)
        assert sum(len(keys) for keys in categories) == len(set(cli) | set(editor))

    def test_swapping_sources_mirrors_the_diff(self) -> None:
        """Swapping sources swaps the one-sided lists and the conflict values."""
        cli = {MAIN: "main", PATTERN: "a", START: "In Progress"}
        editor = {MAIN: "main", PATTERN: "b", DONE: "Done"}

        forward = compute_settings_diff(cli, editor)
        backward = compute_settings_diff(editor, cli)

        assert backward.matching == forward.matching
        assert backward.cli_only == forward.editor_only
        assert backward.editor_only == forward.cli_only
        assert [(c.cli_value, c.editor_value) for c in backward.conflicts] == [(c.editor_value, c.cli_value) for c in forward.conflicts]


class TestHasDifferences:
    """Tests for has_differences."""

    @pytest.mark.parametrize(
        "diff,expected",
        [
            (SettingsDiff(), False),
            (SettingsDiff(matching=(SettingValue(MAIN, "main"),)), False),
            (SettingsDiff(conflicts=(SettingConflict(MAIN, "Main Branch", "main", "master"),)), True),
            (SettingsDiff(cli_only=(SettingValue(MAIN, "main"),)), True),
            (SettingsDiff(editor_only=(SettingValue(MAIN, "main"),)), True),
        ],
    )
    def test_has_differences(self, diff: SettingsDiff, expected: bool) -> None:
        """Only conflicts and one-sided settings count as differences."""
        assert has_differences(diff) is expected


class TestConflictResolution:
    """Tests for the resolution constructors."""

    def test_constructors(self) -> None:
        """Each constructor builds the matching variant; only custom has a value."""
        assert use_cli() == ConflictResolution(ResolutionChoice.USE_CLI)
        assert use_editor() == ConflictResolution(ResolutionChoice.USE_EDITOR)
        assert skip() == ConflictResolution(ResolutionChoice.SKIP)
        assert use_custom("trunk").value == "trunk"

    def test_custom_requires_value(self) -> None:
        """A custom resolution without a value is rejected."""
        with pytest.raises(ValueError):
            ConflictResolution(ResolutionChoice.USE_CUSTOM)

    def test_non_custom_rejects_value(self) -> None:
        """Only custom resolutions carry a value."""
        with pytest.raises(ValueError):
            ConflictResolution(ResolutionChoice.USE_CLI, "main")


class TestResolveConflicts:
    """Tests for resolve_conflicts."""

    @pytest.fixture
    def diff(self) -> SettingsDiff:
        """A diff with a single main branch conflict."""
        return compute_settings_diff({MAIN: "main"}, {MAIN: "master"})

    def test_use_cli_updates_editor(self, diff: SettingsDiff) -> None:
        """Keeping the CLI value writes it to the editor only."""
        patches = resolve_conflicts(diff, {MAIN: use_cli()})
        assert patches.editor == {MAIN: "main"}
        assert patches.cli == {}

    def test_use_editor_updates_cli(self, diff: SettingsDiff) -> None:
        """Keeping the editor value writes it to the CLI only."""
        patches = resolve_conflicts(diff, {MAIN: use_editor()})
        assert patches.cli == {MAIN: "master"}
        assert patches.editor == {}

    def test_use_custom_updates_both(self, diff: SettingsDiff) -> None:
        """A custom value is written to both sources."""
        patches = resolve_conflicts(diff, {MAIN: use_custom("trunk")})
        assert patches.cli == {MAIN: "trunk"}
        assert patches.editor == {MAIN: "trunk"}

    def test_skip_updates_nothing(self, diff: SettingsDiff) -> None:
        """Skipping leaves both sources untouched."""
        assert resolve_conflicts(diff, {MAIN: skip()}).is_empty()

    def test_missing_resolution_is_skipped(self, diff: SettingsDiff) -> None:
        """Conflicts without a resolution are dropped."""
        assert resolve_conflicts(diff, {}).is_empty()

    def test_one_sided_settings_are_not_included(self) -> None:
        """Settings configured on one side are left to the caller."""
        diff = compute_settings_diff({MAIN: "main", DONE: "Done"}, {MAIN: "master", START: "Doing"})
        patches = resolve_conflicts(diff, {MAIN: use_cli()})
        assert patches == MergePatches(cli={}, editor={MAIN: "main"})

    def test_string_keys_in_choices(self, diff: SettingsDiff) -> None:
        """Resolutions may be keyed by canonical string names."""
        patches = resolve_conflicts(diff, {"mainBranch": use_editor()})
        assert patches.cli == {MAIN: "master"}

    def test_unknown_key_in_choices_raises(self, diff: SettingsDiff) -> None:
        """A resolution for a non-syncable key is a contract violation."""
        with pytest.raises(UnknownSettingKeyError):
            resolve_conflicts(diff, {"defaultProject": use_cli()})

    def test_dry_run_computes_the_same_patches(self, diff: SettingsDiff) -> None:
        """A dry run returns the same patches as a real run."""
        assert resolve_conflicts(diff, {MAIN: use_custom("trunk")}, dry_run=True) == resolve_conflicts(diff, {MAIN: use_custom("trunk")})

    def test_dry_run_is_logged(self, diff: SettingsDiff, caplog: pytest.LogCaptureFixture) -> None:
        """A dry run logs the keys that would be written."""
        caplog.set_level(logging.INFO)
        resolve_conflicts(diff, {MAIN: use_cli()}, dry_run=True)
        assert "Dry run" in caplog.text

    def test_multiple_conflicts(self) -> None:
        """Each conflict is resolved independently."""
        diff = compute_settings_diff(
            {MAIN: "main", PATTERN: "a", START: "Doing", DONE: "Done"},
            {MAIN: "master", PATTERN: "b", START: "In Progress", DONE: "Closed"},
        )
        patches = resolve_conflicts(
            diff,
            {MAIN: use_cli(), PATTERN: use_editor(), START: use_custom("Active"), DONE: skip()},
        )
        assert patches.cli == {PATTERN: "b", START: "Active"}
        assert patches.editor == {MAIN: "main", START: "Active"}


class TestApplyOneSidedChoices:
    """Tests for apply_one_sided_choices."""

    @pytest.fixture
    def diff(self) -> SettingsDiff:
        """A diff with one conflict and a one-sided setting on each side."""
        return compute_settings_diff({MAIN: "main", DONE: "Done"}, {MAIN: "master", START: "In Progress"})

    def test_copies_approved_settings_across(self, diff: SettingsDiff) -> None:
        """CLI-only settings go to the editor and editor-only settings go to the CLI."""
        patches = apply_one_sided_choices(MergePatches(), diff, sync_cli_only=[DONE], sync_editor_only=[START])
        assert patches.editor == {DONE: "Done"}
        assert patches.cli == {START: "In Progress"}

    def test_unions_with_conflict_patches(self, diff: SettingsDiff) -> None:
        """Approved one-sided settings are added to the resolved conflicts."""
        resolved = resolve_conflicts(diff, {MAIN: use_cli()})
        patches = apply_one_sided_choices(resolved, diff, sync_cli_only=[DONE])
        assert patches.editor == {MAIN: "main", DONE: "Done"}
        assert patches.cli == {}

    def test_does_not_mutate_input_patches(self, diff: SettingsDiff) -> None:
        """The given patches are left untouched."""
        resolved = MergePatches()
        apply_one_sided_choices(resolved, diff, sync_cli_only=[DONE])
        assert resolved.is_empty()

    def test_no_approvals_returns_equal_patches(self, diff: SettingsDiff) -> None:
        """Without approvals the patches are unchanged."""
        resolved = resolve_conflicts(diff, {MAIN: use_custom("trunk")})
        assert apply_one_sided_choices(resolved, diff) == resolved

    def test_rejects_key_that_is_not_one_sided(self, diff: SettingsDiff) -> None:
        """Approving a conflicting or wrong-side key is rejected."""
        with pytest.raises(SettingNotOneSidedError):
            apply_one_sided_choices(MergePatches(), diff, sync_cli_only=[MAIN])
        with pytest.raises(SettingNotOneSidedError):
            apply_one_sided_choices(MergePatches(), diff, sync_editor_only=[DONE])

    def test_rejects_unknown_key(self, diff: SettingsDiff) -> None:
        """Approving a non-syncable key is a contract violation."""
        with pytest.raises(UnknownSettingKeyError):
            apply_one_sided_choices(MergePatches(), diff, sync_cli_only=["defaultProject"])


class TestGetDiffSummary:
    """Tests for get_diff_summary."""

    def test_reports_all_four_counts(self) -> None:
        """The summary includes the count of every category."""
        diff = compute_settings_diff(
            {MAIN: "main", PATTERN: "a", START: "Doing"},
            {MAIN: "master", PATTERN: "a", DONE: "Done"},
        )
        assert get_diff_summary(diff) == "1 conflict, 1 only in CLI, 1 only in editor, 1 matching"

    def test_pluralizes_conflicts(self) -> None:
        """More than one conflict uses the plural form."""
        diff = compute_settings_diff({MAIN: "a", DONE: "b"}, {MAIN: "c", DONE: "d"})
        assert get_diff_summary(diff) == "2 conflicts, 0 only in CLI, 0 only in editor, 0 matching"

    def test_empty_diff(self) -> None:
        """An empty diff reports zero everywhere."""
        assert get_diff_summary(SettingsDiff()) == "0 conflicts, 0 only in CLI, 0 only in editor, 0 matching"
