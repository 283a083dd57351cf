"""Contains exceptions raised when persisting project status configuration."""

from pathlib import Path


class ProjectConfigStoreError(Exception):
    """Raised when the project configuration document cannot be read, parsed, or written."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the document path and the underlying reason."""
        super().__init__(f"Project configuration file {path}: {reason}")
        self.path = path
        self.reason = reason
