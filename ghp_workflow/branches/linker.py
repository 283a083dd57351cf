"""Persists links between git branches and GitHub project items."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import structlog
from pydantic import BaseModel, Field, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ghp_workflow.branches.exceptions import BranchLinkStoreError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class BranchIssueLink(BaseModel):
    """Pydantic model for a link between a branch and the issue it implements."""

    branch_name: str
    issue_number: int
    issue_title: str
    project_item_id: str
    linked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BranchLinksModel(BaseModel):
    """Pydantic model for the branch links YAML document."""

    links: list[BranchIssueLink] = Field(default_factory=list)


class BranchLinkStore:
    """Branch to issue links for a workspace, kept in a YAML document.

    A branch is linked to at most one project item and a project item to at
    most one branch; linking replaces any previous link of either.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store with the path of the YAML document."""
        self.path = path
        self._yaml = YAML(typ="safe")
        self._yaml.default_flow_style = False

    def _load(self) -> BranchLinksModel:
        if not self.path.exists():
            return BranchLinksModel()
        try:
            with open(self.path, encoding="utf-8") as f:
                content: Any = self._yaml.load(f)
        except OSError as exc:
            raise BranchLinkStoreError(self.path, f"failed to read file ({exc})") from exc
        except YAMLError as exc:
            raise BranchLinkStoreError(self.path, f"failed to parse YAML ({exc})") from exc
        if content is None:
            return BranchLinksModel()
        try:
            return BranchLinksModel.model_validate(content)
        except ValidationError as exc:
            raise BranchLinkStoreError(self.path, f"invalid branch links document ({exc})") from exc

    def _save(self, model: BranchLinksModel) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                self._yaml.dump(model.model_dump(mode="json"), f)
        except OSError as exc:
            raise BranchLinkStoreError(self.path, f"failed to write file ({exc})") from exc

    def get_links(self) -> list[BranchIssueLink]:
        """Returns every branch link in the workspace."""
        return self._load().links

    def link_branch(self, branch_name: str, issue_number: int, issue_title: str, project_item_id: str) -> BranchIssueLink:
        """Link a branch to a project item, replacing existing links for either of them."""
        model = self._load()
        model.links = [link for link in model.links if link.project_item_id != project_item_id and link.branch_name != branch_name]
        link = BranchIssueLink(
            branch_name=branch_name,
            issue_number=issue_number,
            issue_title=issue_title,
            project_item_id=project_item_id,
        )
        model.links.append(link)
        self._save(model)
        logger.info("Linked branch to issue", branch_name=branch_name, issue_number=issue_number, project_item_id=project_item_id)
        return link

    def get_branch_for_issue(self, project_item_id: str) -> str | None:
        """Returns the branch linked to a project item, if any."""
        for link in self.get_links():
            if link.project_item_id == project_item_id:
                return link.branch_name
        return None

    def get_issue_for_branch(self, branch_name: str) -> BranchIssueLink | None:
        """Returns the link for a branch, if any."""
        for link in self.get_links():
            if link.branch_name == branch_name:
                return link
        return None

    def unlink_by_issue(self, project_item_id: str) -> bool:
        """Remove the link for a project item. Returns whether a link was removed."""
        return self._remove(lambda link: link.project_item_id == project_item_id)

    def unlink_by_branch(self, branch_name: str) -> bool:
        """Remove the link for a branch. Returns whether a link was removed."""
        return self._remove(lambda link: link.branch_name == branch_name)

    def _remove(self, predicate: Callable[[BranchIssueLink], bool]) -> bool:
        model = self._load()
        remaining = [link for link in model.links if not predicate(link)]
        removed = len(model.links) - len(remaining)
        if removed == 0:
            return False
        model.links = remaining
        self._save(model)
        logger.info("Removed branch links", removed=removed)
        return True
