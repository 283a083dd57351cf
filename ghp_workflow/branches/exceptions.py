"""Contains exceptions raised when persisting branch links."""

from pathlib import Path


class BranchLinkStoreError(Exception):
    """Raised when the branch links document cannot be read, parsed, or written."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the document path and the underlying reason."""
        super().__init__(f"Branch links file {path}: {reason}")
        self.path = path
        self.reason = reason
