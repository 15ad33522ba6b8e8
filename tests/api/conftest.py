"""Fixtures for endpoint tests: authentication and services are overridden."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from audit_ai.core.auth import get_current_user
from audit_ai.dependencies import get_chat_context_builder, get_document_lifecycle_manager, get_user_service
from audit_ai.main import app
from audit_ai.schemas.auth import CurrentUser
from audit_ai.services.chat.chat_context_builder import ChatContextBuilder
from audit_ai.services.document_lifecycle_service import DocumentLifecycleManager
from audit_ai.services.user_service import UserService

AUTH_HEADERS = {"Authorization": "Bearer test-token"}


@pytest.fixture
def current_user() -> CurrentUser:
    return CurrentUser(id=str(uuid4()), email="auditor@contoso.com", role="authenticated")


@pytest.fixture
def db_user():
    return SimpleNamespace(id=uuid4(), email="auditor@contoso.com")


@pytest.fixture
def user_service(db_user):
    service = MagicMock(spec=UserService)
    service.get_or_create_user_from_jwt = AsyncMock(return_value=db_user)
    return service


@pytest.fixture
def lifecycle():
    return MagicMock(spec=DocumentLifecycleManager)


@pytest.fixture
def chat_builder():
    return MagicMock(spec=ChatContextBuilder)


@pytest.fixture
def authenticated(current_user, user_service, lifecycle, chat_builder):
    """Install dependency overrides for an authenticated caller."""
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_user_service] = lambda: user_service
    app.dependency_overrides[get_document_lifecycle_manager] = lambda: lifecycle
    app.dependency_overrides[get_chat_context_builder] = lambda: chat_builder
    return AUTH_HEADERS
