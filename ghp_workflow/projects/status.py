"""Maps GitHub project status options onto a shared set of status categories."""

from types import MappingProxyType
from typing import Iterable, Mapping

import structlog
from pydantic import BaseModel, Field

from ghp_workflow.utils.constants import UNKNOWN_STATUS_ORDER

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class StatusMapping(BaseModel):
    """Pydantic model for how a status category is displayed."""

    display_name: str
    order: int
    icon: str | None = None
    color: str | None = None


class ProjectStatusConfig(BaseModel):
    """Pydantic model for a project's status option to category mappings."""

    project_id: str
    project_title: str
    enabled: bool = True
    status_mappings: dict[str, str] = Field(default_factory=dict)


DEFAULT_STATUS_CATEGORIES: Mapping[str, StatusMapping] = MappingProxyType(
    {
        "In Progress": StatusMapping(display_name="In Progress", order=0, icon="play-circle", color="charts.yellow"),
        "In Review": StatusMapping(display_name="In Review", order=1, icon="eye", color="charts.purple"),
        "Todo": StatusMapping(display_name="Todo", order=2, icon="circle-outline"),
        "Backlog": StatusMapping(display_name="Backlog", order=3, icon="inbox"),
        "Done": StatusMapping(display_name="Done", order=4, icon="pass-filled", color="charts.green"),
        "Blocked": StatusMapping(display_name="Blocked", order=5, icon="error", color="charts.red"),
    }
)

# Checked in order; the first category with a matching keyword wins.
_STATUS_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("In Progress", ("progress", "doing", "active")),
    ("In Review", ("review", "pr ", "waiting")),
    ("Todo", ("todo", "ready", "next")),
    ("Backlog", ("backlog", "later", "icebox")),
    ("Done", ("done", "complete", "closed", "shipped")),
    ("Blocked", ("block", "stuck", "hold")),
)


def auto_map_status(status_name: str) -> str:
    """Guess the category of a project status option from its name.

    Names that match no category keep their original name.
    """
    lowered = status_name.lower()
    for category, keywords in _STATUS_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return status_name


def build_project_status_config(project_id: str, project_title: str, status_options: Iterable[str]) -> ProjectStatusConfig:
    """Create a project configuration with every status option auto-mapped to a category."""
    status_mappings = {status: auto_map_status(status) for status in status_options}
    logger.debug("Auto-mapped project statuses", project_id=project_id, mappings=status_mappings)
    return ProjectStatusConfig(project_id=project_id, project_title=project_title, status_mappings=status_mappings)


def map_status(config: ProjectStatusConfig | None, status: str) -> str:
    """Returns the category a project status is mapped to, or the status itself if unmapped."""
    if config is None:
        return status
    return config.status_mappings.get(status) or status


def get_status_display(category: str, categories: Mapping[str, StatusMapping] = DEFAULT_STATUS_CATEGORIES) -> StatusMapping:
    """Returns the display information for a status category."""
    return categories.get(category) or StatusMapping(display_name=category, order=UNKNOWN_STATUS_ORDER)
