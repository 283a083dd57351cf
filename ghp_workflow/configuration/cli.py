"""Defines the Command Line Interface (CLI) using Typer."""

from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from ghp_workflow.branches.exceptions import BranchLinkStoreError
from ghp_workflow.branches.linker import BranchLinkStore
from ghp_workflow.branches.naming import BranchNameVariables, extract_issue_number, generate_branch_name, parse_repo_string, sanitize_for_branch_name
from ghp_workflow.branches.relevance import score_branches
from ghp_workflow.configuration.env import settings
from ghp_workflow.projects.config import ProjectConfigStore
from ghp_workflow.projects.exceptions import ProjectConfigStoreError
from ghp_workflow.projects.status import StatusMapping, build_project_status_config, get_status_display
from ghp_workflow.settings_sync.exceptions import SettingsStoreError
from ghp_workflow.settings_sync.models import SETTING_DISPLAY_NAMES
from ghp_workflow.settings_sync.reconcile import compute_settings_diff, get_diff_summary, has_differences
from ghp_workflow.settings_sync.stores import CliConfigStore, ConfigurationTarget, EditorSettingsStore
from ghp_workflow.settings_sync.workflow import (
    SettingsSyncStatus,
    TyperSyncPrompter,
    describe_patches,
    run_settings_sync,
)
from ghp_workflow.utils.logging import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="GitHub Projects branch workflow and settings sync.")


@typer_app.callback()
def main_callback(
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = settings.DEBUG,
) -> None:
    """Configure logging before any command runs."""
    configure_logging(debug)


def build_stores(cli_config: Path, editor_settings: Path, workspace: Path | None) -> tuple[CliConfigStore, EditorSettingsStore]:
    """Builds the CLI and editor stores, preferring workspace-scoped editor settings when a workspace is given."""
    if workspace is not None:
        editor_store = EditorSettingsStore.for_target(ConfigurationTarget.WORKSPACE, workspace)
    else:
        editor_store = EditorSettingsStore(editor_settings)
    return CliConfigStore(cli_config), editor_store


CliConfigOption = Annotated[Path, Option(envvar="GHP_CLI_CONFIG_PATH", help="Path to the ghp CLI config file.")]
EditorSettingsOption = Annotated[Path, Option(envvar="EDITOR_SETTINGS_PATH", help="Path to the editor user settings file.")]
WorkspaceOption = Annotated[
    Path | None,
    Option(help="Workspace root; when given, the workspace's editor settings are used instead of the user settings."),
]
LinksFileOption = Annotated[Path, Option(envvar="BRANCH_LINKS_PATH", help="Path to the branch links YAML file.")]
ProjectConfigOption = Annotated[Path, Option(envvar="PROJECT_CONFIG_PATH", help="Path to the project status configuration YAML file.")]


# --- Settings sync commands ---
@typer_app.command(name="diff-settings")
def diff_settings_cli(
    cli_config: CliConfigOption = settings.GHP_CLI_CONFIG_PATH,
    editor_settings: EditorSettingsOption = settings.EDITOR_SETTINGS_PATH,
    workspace: WorkspaceOption = None,
) -> None:
    """Show how the syncable settings differ between the ghp CLI and the editor."""
    cli_store, editor_store = build_stores(cli_config, editor_settings, workspace)
    try:
        diff = compute_settings_diff(cli_store.load(), editor_store.load())
    except SettingsStoreError as e:
        typer.echo(f"Error reading settings: {e}", err=True)
        raise typer.Exit(1) from e

    for entry in diff.matching:
        typer.echo(f"= {SETTING_DISPLAY_NAMES[entry.key]}: {entry.value}")
    for conflict in diff.conflicts:
        typer.echo(f'! {conflict.display_name}: CLI "{conflict.cli_value}" vs editor "{conflict.editor_value}"')
    for entry in diff.cli_only:
        typer.echo(f"< {SETTING_DISPLAY_NAMES[entry.key]}: {entry.value} (only in CLI)")
    for entry in diff.editor_only:
        typer.echo(f"> {SETTING_DISPLAY_NAMES[entry.key]}: {entry.value} (only in editor)")

    if has_differences(diff):
        typer.echo(f"Settings differ: {get_diff_summary(diff)}")
    elif diff.matching:
        typer.echo("Settings are already in sync.")
    else:
        typer.echo("No syncable settings found in either CLI or editor.")


@typer_app.command(name="sync-settings")
def sync_settings_cli(
    cli_config: CliConfigOption = settings.GHP_CLI_CONFIG_PATH,
    editor_settings: EditorSettingsOption = settings.EDITOR_SETTINGS_PATH,
    workspace: WorkspaceOption = None,
    dry_run: Annotated[bool, Option(help="Show the changes that would be made without writing them.")] = False,
) -> None:
    """Interactively reconcile the syncable settings of the ghp CLI and the editor."""
    cli_store, editor_store = build_stores(cli_config, editor_settings, workspace)
    try:
        result = run_settings_sync(cli_store, editor_store, TyperSyncPrompter(), dry_run=dry_run)
    except SettingsStoreError as e:
        typer.echo(f"Error reading settings: {e}", err=True)
        raise typer.Exit(1) from e

    if result.status is SettingsSyncStatus.IN_SYNC:
        typer.echo("Settings are already in sync.")
    elif result.status is SettingsSyncStatus.NOTHING_CONFIGURED:
        typer.echo("No syncable settings found in either CLI or editor.")
    elif result.status is SettingsSyncStatus.CANCELLED:
        typer.echo("Sync cancelled.")
    elif result.status is SettingsSyncStatus.NO_CHANGES:
        typer.echo("No changes to apply.")
    elif result.status is SettingsSyncStatus.DRY_RUN:
        typer.echo(f"Dry run - would apply changes to {describe_patches(result.patches)}")
    elif result.status is SettingsSyncStatus.APPLIED:
        typer.echo("Settings synced successfully.")
    else:
        failures = "; ".join(f"{source.value}: {error}" for source, error in result.errors.items())
        typer.echo(f"Sync partially failed: {failures}", err=True)
        raise typer.Exit(1)


# --- Branch commands ---
@typer_app.command(name="sanitize")
def sanitize_cli(
    text: Annotated[str, Argument(help="Free text to turn into a branch-safe slug.")],
) -> None:
    """Print the branch-safe slug for a piece of text."""
    typer.echo(sanitize_for_branch_name(text))


@typer_app.command(name="branch-name")
def branch_name_cli(
    title: Annotated[str, Option(help="Issue title.")],
    number: Annotated[int | None, Option(help="Issue number; omit for draft items.")] = None,
    user: Annotated[str, Option(envvar="GITHUB_USER", help="GitHub username.")] = settings.GITHUB_USER,
    repo: Annotated[str | None, Option(help="Repository name (owner/repo).")] = None,
    pattern: Annotated[str, Option(envvar="BRANCH_NAME_PATTERN", help="Branch name pattern.")] = settings.BRANCH_NAME_PATTERN,
    max_length: Annotated[int, Option(envvar="MAX_BRANCH_NAME_LENGTH", min=1, help="Maximum branch name length.")] = settings.MAX_BRANCH_NAME_LENGTH,
) -> None:
    """Print the branch name the Start Working workflow would create for an issue."""
    if repo is not None and parse_repo_string(repo) is None:
        typer.echo(f"Invalid repository '{repo}', expected owner/name.", err=True)
        raise typer.Exit(1)
    variables = BranchNameVariables(user=user, number=number, title=title, repo=repo)
    typer.echo(generate_branch_name(pattern, variables, max_length))


@typer_app.command(name="issue-number")
def issue_number_cli(
    branch_name: Annotated[str, Argument(help="Branch name to inspect.")],
) -> None:
    """Print the issue number encoded in a branch name."""
    issue_number = extract_issue_number(branch_name)
    if issue_number is None:
        typer.echo(f"No issue number found in branch '{branch_name}'.", err=True)
        raise typer.Exit(1)
    typer.echo(str(issue_number))


@typer_app.command(name="rank-branches")
def rank_branches_cli(
    branches: Annotated[list[str], Argument(help="Candidate branch names.")],
    title: Annotated[str, Option(help="Issue title.")] = "",
    issue_number: Annotated[int | None, Option(help="Issue number.")] = None,
    show_scores: Annotated[bool, Option(help="Print the relevance score next to each branch.")] = False,
) -> None:
    """Order existing branches by how likely they belong to an issue."""
    for relevance in score_branches(branches, issue_number, title):
        if show_scores:
            typer.echo(f"{relevance.score}\t{relevance.branch}")
        else:
            typer.echo(relevance.branch)


@typer_app.command(name="link-branch")
def link_branch_cli(
    branch_name: Annotated[str, Argument(help="Branch to link.")],
    issue_number: Annotated[int, Argument(help="Issue number.")],
    issue_title: Annotated[str, Argument(help="Issue title.")],
    project_item_id: Annotated[str, Argument(help="Project item ID.")],
    links_file: LinksFileOption = settings.BRANCH_LINKS_PATH,
) -> None:
    """Link a branch to a project item, replacing earlier links of either."""
    store = BranchLinkStore(links_file)
    try:
        store.link_branch(branch_name, issue_number, issue_title, project_item_id)
    except BranchLinkStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    typer.echo(f"Linked {branch_name} to #{issue_number}")


@typer_app.command(name="unlink-branch")
def unlink_branch_cli(
    branch_name: Annotated[str | None, Option("--branch", help="Branch whose link should be removed.")] = None,
    project_item_id: Annotated[str | None, Option("--item", help="Project item whose link should be removed.")] = None,
    links_file: LinksFileOption = settings.BRANCH_LINKS_PATH,
) -> None:
    """Remove a branch link by branch name or by project item."""
    if (branch_name is None) == (project_item_id is None):
        typer.echo("Provide exactly one of --branch or --item.", err=True)
        raise typer.Exit(1)

    store = BranchLinkStore(links_file)
    try:
        if branch_name is not None:
            removed = store.unlink_by_branch(branch_name)
        else:
            removed = store.unlink_by_issue(project_item_id)  # type: ignore[arg-type]
    except BranchLinkStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    typer.echo("Link removed." if removed else "No matching link found.")


@typer_app.command(name="links")
def links_cli(
    links_file: LinksFileOption = settings.BRANCH_LINKS_PATH,
) -> None:
    """List branch links."""
    try:
        links = BranchLinkStore(links_file).get_links()
    except BranchLinkStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    if not links:
        typer.echo("No branch links.")
        return
    for link in links:
        typer.echo(f"{link.branch_name}\t#{link.issue_number}\t{link.issue_title}\t{link.project_item_id}")


# --- Project commands ---
@typer_app.command(name="map-statuses")
def map_statuses_cli(
    statuses: Annotated[list[str], Argument(help="Status option names of a project.")],
    project_id: Annotated[str | None, Option("--project", help="Use the saved mappings of this project instead of guessing.")] = None,
    config_file: ProjectConfigOption = settings.PROJECT_CONFIG_PATH,
) -> None:
    """Show which status category each project status option maps to."""
    if project_id is None:
        mappings = build_project_status_config("cli", "cli", statuses).status_mappings
        ordered = sorted(mappings.items(), key=lambda item: get_status_display(item[1]).order)
    else:
        store = ProjectConfigStore(config_file)
        try:
            mappings = {status: store.map_status(project_id, status) for status in statuses}
            config = store.get_config()
        except ProjectConfigStoreError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(1) from e
        ordered = sorted(mappings.items(), key=lambda item: get_status_display(item[1], config.status_categories).order)
    for status, category in ordered:
        typer.echo(f"{status} -> {category}")


@typer_app.command(name="init-project")
def init_project_cli(
    project_id: Annotated[str, Argument(help="Project ID.")],
    project_title: Annotated[str, Argument(help="Project title.")],
    statuses: Annotated[list[str], Argument(help="Status option names of the project.")],
    config_file: ProjectConfigOption = settings.PROJECT_CONFIG_PATH,
) -> None:
    """Save auto-mapped status categories for a project, keeping any existing configuration."""
    try:
        project_config = ProjectConfigStore(config_file).initialize_project_config(project_id, project_title, statuses)
    except ProjectConfigStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    for status, category in project_config.status_mappings.items():
        typer.echo(f"{status} -> {category}")


@typer_app.command(name="set-project-enabled")
def set_project_enabled_cli(
    project_id: Annotated[str, Argument(help="Project ID.")],
    enabled: Annotated[bool, Option("--enable/--disable", help="Whether the project is shown.")] = True,
    config_file: ProjectConfigOption = settings.PROJECT_CONFIG_PATH,
) -> None:
    """Enable or disable a configured project."""
    try:
        updated = ProjectConfigStore(config_file).set_project_enabled(project_id, enabled)
    except ProjectConfigStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    if not updated:
        typer.echo(f"Project {project_id} is not configured.", err=True)
        raise typer.Exit(1)
    typer.echo(f"Project {project_id} {'enabled' if enabled else 'disabled'}.")


@typer_app.command(name="projects")
def projects_cli(
    config_file: ProjectConfigOption = settings.PROJECT_CONFIG_PATH,
) -> None:
    """List the IDs of enabled projects."""
    try:
        project_ids = ProjectConfigStore(config_file).get_enabled_project_ids()
    except ProjectConfigStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    if not project_ids:
        typer.echo("No enabled projects.")
        return
    for project_id in project_ids:
        typer.echo(project_id)


@typer_app.command(name="add-status-category")
def add_status_category_cli(
    name: Annotated[str, Argument(help="Category name.")],
    order: Annotated[int, Option(help="Sort position of the category.")],
    icon: Annotated[str | None, Option(help="Icon shown for the category.")] = None,
    color: Annotated[str | None, Option(help="Color shown for the category.")] = None,
    config_file: ProjectConfigOption = settings.PROJECT_CONFIG_PATH,
) -> None:
    """Add a custom status category, or replace one with the same name."""
    mapping = StatusMapping(display_name=name, order=order, icon=icon, color=color)
    try:
        ProjectConfigStore(config_file).add_status_category(name, mapping)
    except ProjectConfigStoreError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    typer.echo(f"Added status category {name}.")
