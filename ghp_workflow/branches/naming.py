"""Branch name generation for the Start Working workflow.

Branch names are built from a pattern such as ``{user}/{number}-{title}``.
Free text is sanitized into a git-safe slug before substitution, and names
longer than the configured maximum are truncated while keeping the
``{user}/{number}-`` prefix intact whenever the result starts with one.
"""

from dataclasses import dataclass

import structlog

from ghp_workflow.utils.constants import (
    BRANCH_PREFIX_PATTERN,
    BRANCH_UNSAFE_CHARACTERS_PATTERN,
    DRAFT_BRANCH_NUMBER,
    ISSUE_NUMBER_PATTERNS,
    REPEATED_HYPHEN_PATTERN,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BranchNameVariables:
    """Values substituted into a branch name pattern.

    A ``number`` of None denotes a draft project item with no issue yet.
    ``repo`` is in ``owner/name`` form when present.
    """

    user: str
    number: int | None
    title: str
    repo: str | None = None


@dataclass(frozen=True)
class RepositoryInfo:
    """A GitHub repository identified by owner and name."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        """Returns the repository in 'owner/name' form."""
        return f"{self.owner}/{self.name}"


def parse_repo_string(repo: str | None) -> RepositoryInfo | None:
    """Parse an 'owner/name' repository string.

    Returns None unless the string has exactly two non-empty parts separated by a slash.
    """
    if not repo:
        return None
    parts = repo.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return RepositoryInfo(owner=parts[0], name=parts[1])


def sanitize_for_branch_name(text: str) -> str:
    """Slugify free text for use in branch names (lowercase, hyphens, alphanum only)."""
    slug = text.lower()
    slug = BRANCH_UNSAFE_CHARACTERS_PATTERN.sub("-", slug)
    slug = REPEATED_HYPHEN_PATTERN.sub("-", slug)
    slug = slug.strip("-")
    return slug


def repository_short_name(repo: str | None) -> str:
    """Returns the sanitized name part of an 'owner/name' repository, or an empty string."""
    if not repo or "/" not in repo:
        return ""
    _, name = repo.split("/", 1)
    return sanitize_for_branch_name(name)


def extract_issue_number(branch_name: str) -> int | None:
    """Recover the issue number a branch was created for, or None if it has none.

    Recognizes 'user/123-title', '123-title', 'feature-123-title', and names
    ending in '#123' or '/123'. The first pattern that matches anywhere in the
    name wins.
    """
    for pattern in ISSUE_NUMBER_PATTERNS:
        match = pattern.search(branch_name)
        if match is not None:
            return int(match.group(1))
    return None


def truncate_branch_name(branch_name: str, max_length: int) -> str:
    """Truncate a branch name to max_length, keeping a '{user}/{number}-' prefix when present.

    Only the part after the prefix is shortened and a trailing hyphen left by
    the cut is removed. Names without such a prefix are cut at exactly
    max_length characters.
    """
    if len(branch_name) <= max_length:
        return branch_name

    prefix_match = BRANCH_PREFIX_PATTERN.match(branch_name)
    if prefix_match is None:
        return branch_name[:max_length]

    prefix = prefix_match.group(0)
    remainder = branch_name[len(prefix) :][: max(0, max_length - len(prefix))]
    if remainder.endswith("-"):
        remainder = remainder[:-1]
    return prefix + remainder


def generate_branch_name(pattern: str, variables: BranchNameVariables, max_length: int) -> str:
    """Generate a branch name from a pattern like '{user}/{number}-{title}'.

    Args:
        pattern: Template containing any of the {user}, {number}, {title} and {repo} placeholders.
            Only the first occurrence of each placeholder is substituted.
        variables: The values to substitute.
        max_length: Maximum length of the resulting branch name.

    Returns:
        str: The branch name, truncated to max_length if needed.
    """
    number = str(variables.number) if variables.number is not None else DRAFT_BRANCH_NUMBER
    branch_name = (
        pattern.replace("{user}", variables.user, 1)
        .replace("{number}", number, 1)
        .replace("{title}", sanitize_for_branch_name(variables.title), 1)
        .replace("{repo}", repository_short_name(variables.repo), 1)
    )

    truncated = truncate_branch_name(branch_name, max_length)
    if truncated != branch_name:
        logger.debug(
            "Truncated branch name",
            original_length=len(branch_name),
            truncated_length=len(truncated),
            max_length=max_length,
        )
    return truncated
