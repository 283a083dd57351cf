"""Persists per-project status mappings and custom status categories for a workspace."""

from pathlib import Path
from typing import Any, Iterable

import structlog
from pydantic import BaseModel, Field, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ghp_workflow.projects.exceptions import ProjectConfigStoreError
from ghp_workflow.projects.status import (
    DEFAULT_STATUS_CATEGORIES,
    ProjectStatusConfig,
    StatusMapping,
    build_project_status_config,
    get_status_display,
    map_status,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _default_status_categories() -> dict[str, StatusMapping]:
    return {name: mapping.model_copy() for name, mapping in DEFAULT_STATUS_CATEGORIES.items()}


class ProjectsConfigModel(BaseModel):
    """Pydantic model for the project configuration YAML document."""

    status_categories: dict[str, StatusMapping] = Field(default_factory=_default_status_categories)
    projects: dict[str, ProjectStatusConfig] = Field(default_factory=dict)


class ProjectConfigStore:
    """Project status configuration for a workspace, kept in a YAML document.

    The document holds the status categories (the defaults plus any custom
    ones) and, per project ID, the mapping of its status options onto those
    categories. Updates to a project that has not been initialized are ignored.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store with the path of the YAML document."""
        self.path = path
        self._yaml = YAML(typ="safe")
        self._yaml.default_flow_style = False

    def _load(self) -> ProjectsConfigModel:
        if not self.path.exists():
            return ProjectsConfigModel()
        try:
            with open(self.path, encoding="utf-8") as f:
                content: Any = self._yaml.load(f)
        except OSError as exc:
            raise ProjectConfigStoreError(self.path, f"failed to read file ({exc})") from exc
        except YAMLError as exc:
            raise ProjectConfigStoreError(self.path, f"failed to parse YAML ({exc})") from exc
        if content is None:
            return ProjectsConfigModel()
        try:
            return ProjectsConfigModel.model_validate(content)
        except ValidationError as exc:
            raise ProjectConfigStoreError(self.path, f"invalid project configuration document ({exc})") from exc

    def _save(self, model: ProjectsConfigModel) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                self._yaml.dump(model.model_dump(mode="json"), f)
        except OSError as exc:
            raise ProjectConfigStoreError(self.path, f"failed to write file ({exc})") from exc

    def get_config(self) -> ProjectsConfigModel:
        """Returns the whole project configuration document."""
        return self._load()

    def get_project_config(self, project_id: str) -> ProjectStatusConfig | None:
        """Returns the configuration of a project, if it has been initialized."""
        return self._load().projects.get(project_id)

    def initialize_project_config(self, project_id: str, project_title: str, status_options: Iterable[str]) -> ProjectStatusConfig:
        """Create a project's configuration by auto-mapping its status options.

        A project that is already configured keeps its configuration, which is returned unchanged.
        """
        model = self._load()
        existing = model.projects.get(project_id)
        if existing is not None:
            return existing
        project_config = build_project_status_config(project_id, project_title, status_options)
        model.projects[project_id] = project_config
        self._save(model)
        logger.info("Initialized project status configuration", project_id=project_id, project_title=project_title)
        return project_config

    def update_project_mappings(self, project_id: str, mappings: dict[str, str]) -> bool:
        """Replace a project's status mappings. Returns whether the project was configured."""
        model = self._load()
        project_config = model.projects.get(project_id)
        if project_config is None:
            return False
        project_config.status_mappings = dict(mappings)
        self._save(model)
        return True

    def set_project_enabled(self, project_id: str, enabled: bool) -> bool:
        """Enable or disable a project. Returns whether the project was configured."""
        model = self._load()
        project_config = model.projects.get(project_id)
        if project_config is None:
            return False
        project_config.enabled = enabled
        self._save(model)
        logger.info("Updated project enablement", project_id=project_id, enabled=enabled)
        return True

    def get_enabled_project_ids(self) -> list[str]:
        """Returns the IDs of all enabled projects, sorted by ID."""
        return sorted(project_id for project_id, project_config in self._load().projects.items() if project_config.enabled)

    def map_status(self, project_id: str, status: str) -> str:
        """Returns the category a project's status maps to, or the status itself if unmapped."""
        return map_status(self.get_project_config(project_id), status)

    def get_status_display(self, category: str) -> StatusMapping:
        """Returns the display information of a category, including custom categories."""
        return get_status_display(category, self._load().status_categories)

    def add_status_category(self, name: str, mapping: StatusMapping) -> None:
        """Add a custom status category, replacing any category of the same name."""
        model = self._load()
        model.status_categories[name] = mapping
        self._save(model)
        logger.info("Added status category", name=name, order=mapping.order)
