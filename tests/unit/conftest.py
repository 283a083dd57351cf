"""Fixtures for unit tests."""

from typing import Generator

import pytest
import structlog

# Environment variables that Typer options fall back to.
CLI_ENVIRONMENT_VARIABLES = (
    "DEBUG",
    "GHP_CLI_CONFIG_PATH",
    "EDITOR_SETTINGS_PATH",
    "GITHUB_USER",
    "BRANCH_NAME_PATTERN",
    "MAX_BRANCH_NAME_LENGTH",
    "BRANCH_LINKS_PATH",
    "PROJECT_CONFIG_PATH",
)


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Route structlog through the standard library so caplog sees events."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clear_cli_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment from leaking into CLI option defaults."""
    for name in CLI_ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
