"""Shared constants used across the application."""

import re
from pathlib import Path

# Branch Naming Constants
# -----------------------

DEFAULT_BRANCH_NAME_PATTERN = "{user}/{number}-{title}"
"""Default branch name template used by the Start Working workflow."""

DEFAULT_MAX_BRANCH_NAME_LENGTH = 60
"""Default maximum length of a generated branch name."""

DRAFT_BRANCH_NUMBER = "draft"
"""Substituted for {number} when the project item is a draft without an issue number."""

BRANCH_PREFIX_PATTERN = re.compile(r"^[^/]+/\d+-")
"""Pattern to match a '{user}/{number}-' prefix that survives truncation."""

BRANCH_UNSAFE_CHARACTERS_PATTERN = re.compile(r"[^a-z0-9-]")
"""Pattern to match characters that are not allowed in a sanitized branch segment."""

REPEATED_HYPHEN_PATTERN = re.compile(r"-{2,}")
"""Pattern to match runs of two or more hyphens."""

ISSUE_NUMBER_PATTERNS = (
    re.compile(r"/(\d+)-"),
    re.compile(r"^(\d+)-"),
    re.compile(r"-(\d+)-"),
    re.compile(r"[/#](\d+)$"),
)
"""Patterns that recover an issue number from a branch name, tried in order.

They match 'user/123-title', '123-title', 'feature-123-title', and names ending in '#123' or '/123'.
"""

# Branch Relevance Constants
# --------------------------

ISSUE_NUMBER_MATCH_SCORE = 100
"""Score awarded when a branch name contains the issue number."""

TITLE_WORD_MATCH_SCORE = 10
"""Score awarded for every issue title word found in a branch name."""

MIN_TITLE_WORD_LENGTH = 3
"""Title words shorter than this are ignored when ranking branches."""

# Settings Sync Constants
# -----------------------

DEFAULT_CLI_CONFIG_PATH = Path.home() / ".config" / "ghp-cli" / "config.json"
"""Location of the ghp-cli user configuration file."""

DEFAULT_EDITOR_SETTINGS_PATH = Path.home() / ".config" / "Code" / "User" / "settings.json"
"""Location of the editor's user (global) settings file."""

EDITOR_SETTINGS_SECTION = "ghProjects"
"""Configuration section that prefixes every extension setting in the editor."""

WORKSPACE_SETTINGS_RELATIVE_PATH = Path(".vscode") / "settings.json"
"""Location of workspace-scoped editor settings, relative to the workspace root."""

# Branch Link Constants
# ---------------------

DEFAULT_BRANCH_LINKS_PATH = Path(".ghp") / "branch-links.yaml"
"""Default location of the branch/issue link document, relative to the workspace."""

# Project Status Constants
# ------------------------

UNKNOWN_STATUS_ORDER = 99
"""Sort order given to status categories that have no configured display info."""

DEFAULT_PROJECT_CONFIG_PATH = Path(".ghp") / "projects.yaml"
"""Default location of the persisted project status configuration, relative to the workspace."""
