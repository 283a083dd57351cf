"""Ranks existing branches by how likely they belong to an issue."""

import re
from typing import Iterable, NamedTuple

from ghp_workflow.utils.constants import (
    ISSUE_NUMBER_MATCH_SCORE,
    MIN_TITLE_WORD_LENGTH,
    TITLE_WORD_MATCH_SCORE,
)

_NON_WORD_CHARACTERS_PATTERN = re.compile(r"[^a-z0-9\s]")


class BranchRelevance(NamedTuple):
    """A candidate branch and its relevance score for an issue."""

    branch: str
    score: int


def tokenize_issue_title(title: str) -> list[str]:
    """Split an issue title into lowercase words, dropping punctuation and words under three characters."""
    cleaned = _NON_WORD_CHARACTERS_PATTERN.sub("", title.lower())
    return [word for word in cleaned.split() if len(word) >= MIN_TITLE_WORD_LENGTH]


def score_branch_relevance(branch: str, issue_number: int | None, title_words: list[str]) -> int:
    """Score a branch against an issue number and the words of its title.

    The issue number counts when it appears anywhere in the branch name. Each
    title word found in the branch name adds to the score, so repeated words
    count more than once.
    """
    score = 0
    if issue_number is not None and str(issue_number) in branch:
        score += ISSUE_NUMBER_MATCH_SCORE
    lowered = branch.lower()
    for word in title_words:
        if word in lowered:
            score += TITLE_WORD_MATCH_SCORE
    return score


def score_branches(branches: Iterable[str], issue_number: int | None, issue_title: str) -> list[BranchRelevance]:
    """Score every branch and order them from most to least relevant.

    Branches with equal scores keep their original relative order.
    """
    title_words = tokenize_issue_title(issue_title)
    scored = [BranchRelevance(branch, score_branch_relevance(branch, issue_number, title_words)) for branch in branches]
    return sorted(scored, key=lambda relevance: relevance.score, reverse=True)


def rank_branches_by_relevance(branches: Iterable[str], issue_number: int | None, issue_title: str) -> list[str]:
    """Order branch names so the ones most likely to belong to the issue come first."""
    return [relevance.branch for relevance in score_branches(branches, issue_number, issue_title)]
