"""Branch naming, ranking, and branch/issue links for the Start Working workflow."""

from .naming import BranchNameVariables, RepositoryInfo, extract_issue_number, generate_branch_name, parse_repo_string, sanitize_for_branch_name
from .relevance import BranchRelevance, rank_branches_by_relevance, score_branches

__all__ = [
    "BranchNameVariables",
    "BranchRelevance",
    "RepositoryInfo",
    "extract_issue_number",
    "generate_branch_name",
    "parse_repo_string",
    "rank_branches_by_relevance",
    "sanitize_for_branch_name",
    "score_branches",
]
