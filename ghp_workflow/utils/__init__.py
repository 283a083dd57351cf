"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_BRANCH_NAME_PATTERN,
    DEFAULT_MAX_BRANCH_NAME_LENGTH,
    DRAFT_BRANCH_NUMBER,
)

__all__ = [
    "DEFAULT_BRANCH_NAME_PATTERN",
    "DEFAULT_MAX_BRANCH_NAME_LENGTH",
    "DRAFT_BRANCH_NUMBER",
]
