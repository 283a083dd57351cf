"""Contains exceptions raised when reconciling and persisting syncable settings."""

from pathlib import Path


class UnknownSettingKeyError(Exception):
    """Raised when a key outside the canonical syncable setting set is used."""

    def __init__(self, key: object) -> None:
        """Initializes the exception with the offending key."""
        super().__init__(f"Unknown syncable setting key: {key!r}")
        self.key = key


class SettingNotOneSidedError(Exception):
    """Raised when a setting is approved for one-sided sync but is not one-sided in that direction."""

    def __init__(self, key: str, source: str) -> None:
        """Initializes the exception with the setting key and the source it was expected in."""
        super().__init__(f"Setting {key} is not configured only in the {source} source")
        self.key = key
        self.source = source


class SettingsStoreError(Exception):
    """Raised when a settings file cannot be read or written."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the settings file path and the underlying reason."""
        super().__init__(f"Settings file {path}: {reason}")
        self.path = path
        self.reason = reason
