"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from ghp_workflow.utils.constants import (
    DEFAULT_BRANCH_LINKS_PATH,
    DEFAULT_BRANCH_NAME_PATTERN,
    DEFAULT_CLI_CONFIG_PATH,
    DEFAULT_EDITOR_SETTINGS_PATH,
    DEFAULT_MAX_BRANCH_NAME_LENGTH,
    DEFAULT_PROJECT_CONFIG_PATH,
)


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # Settings sync
    GHP_CLI_CONFIG_PATH: Path = DEFAULT_CLI_CONFIG_PATH
    EDITOR_SETTINGS_PATH: Path = DEFAULT_EDITOR_SETTINGS_PATH

    # Branch naming
    GITHUB_USER: str = "user"
    BRANCH_NAME_PATTERN: str = DEFAULT_BRANCH_NAME_PATTERN
    MAX_BRANCH_NAME_LENGTH: int = DEFAULT_MAX_BRANCH_NAME_LENGTH

    # Branch links
    BRANCH_LINKS_PATH: Path = DEFAULT_BRANCH_LINKS_PATH

    # Project status configuration
    PROJECT_CONFIG_PATH: Path = DEFAULT_PROJECT_CONFIG_PATH


settings = Settings()
