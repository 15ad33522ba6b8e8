"""Project-level authorization: owners and assigned auditors only."""

from uuid import UUID

from audit_ai.core.exceptions import AccessDeniedError, ProjectNotFoundError
from audit_ai.database.models import Project
from audit_ai.repositories.project_repository import ProjectRepository
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


def can_access_project(project: Project, user_id: UUID) -> bool:
    """True when ``user_id`` created the project or is assigned to it."""
    if project.created_by == user_id:
        return True
    return user_id in (project.assigned_to or [])


def ensure_project_access(project: Project, user_id: UUID) -> None:
    """Raise ``AccessDeniedError`` unless ``user_id`` may use ``project``."""
    if not can_access_project(project, user_id):
        LOGGER.warning(
            "Project access denied",
            extra={"project_id": str(project.id), "user_id": str(user_id)},
        )
        raise AccessDeniedError(f"Access denied to project {project.id}")


async def load_accessible_project(
    projects: ProjectRepository, project_id: UUID, user_id: UUID
) -> Project:
    """Load a project and check access in one step.

    Raises:
        ProjectNotFoundError: If the project does not exist
        AccessDeniedError: If the user neither owns nor is assigned to it
    """
    project = await projects.get_by_id(project_id)
    if project is None:
        raise ProjectNotFoundError(f"Project {project_id} not found")
    ensure_project_access(project, user_id)
    return project
