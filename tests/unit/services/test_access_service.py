"""Tests for project authorization."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from audit_ai.core.exceptions import AccessDeniedError, ProjectNotFoundError
from audit_ai.repositories.project_repository import ProjectRepository
from audit_ai.services.access_service import can_access_project, load_accessible_project


def test_owner_and_assignee_have_access(project, owner_id):
    auditor_id = uuid4()
    project.assigned_to = [auditor_id]

    assert can_access_project(project, owner_id)
    assert can_access_project(project, auditor_id)
    assert not can_access_project(project, uuid4())


def test_unassigned_project_without_list(project):
    project.assigned_to = None
    assert not can_access_project(project, uuid4())


@pytest.mark.asyncio
async def test_load_accessible_project(project, owner_id):
    projects = MagicMock(spec=ProjectRepository)
    projects.get_by_id = AsyncMock(return_value=project)

    assert await load_accessible_project(projects, project.id, owner_id) is project

    with pytest.raises(AccessDeniedError):
        await load_accessible_project(projects, project.id, uuid4())

    projects.get_by_id.return_value = None
    with pytest.raises(ProjectNotFoundError):
        await load_accessible_project(projects, project.id, owner_id)
