"""Centralized dependency injection for the FastAPI application.

Factories build repositories and services per request. The settings object
is injected here and passed down explicitly; nothing below this module reads
the global ``settings``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from audit_ai.core.config import Settings, settings
from audit_ai.core.database import get_async_session
from audit_ai.core.document_intelligence_client import DocumentIntelligenceClient
from audit_ai.core.llm_client import LanguageModelClient, create_llm_client_from_settings
from audit_ai.repositories.analysis_repository import AnalysisRepository
from audit_ai.repositories.chat_repository import ChatRepository
from audit_ai.repositories.document_repository import DocumentRepository
from audit_ai.repositories.project_repository import ProjectRepository
from audit_ai.services.analysis.analysis_orchestrator import AnalysisOrchestrator
from audit_ai.services.chat.chat_context_builder import ChatContextBuilder
from audit_ai.services.document_lifecycle_service import DocumentLifecycleManager
from audit_ai.services.storage_service import StorageService
from audit_ai.services.user_service import UserService


def get_settings() -> Settings:
    return settings


async def get_document_repository(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> DocumentRepository:
    return DocumentRepository(db_session)


async def get_analysis_repository(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> AnalysisRepository:
    return AnalysisRepository(db_session)


async def get_project_repository(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ProjectRepository:
    return ProjectRepository(db_session)


async def get_chat_repository(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> ChatRepository:
    return ChatRepository(db_session)


async def get_user_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)]
) -> UserService:
    return UserService(db_session)


async def get_storage_service(
    app_settings: Annotated[Settings, Depends(get_settings)]
) -> StorageService:
    return StorageService(app_settings.supabase, timeout=app_settings.http_timeout)


async def get_document_intelligence_client(
    app_settings: Annotated[Settings, Depends(get_settings)],
    storage_service: Annotated[StorageService, Depends(get_storage_service)],
) -> DocumentIntelligenceClient:
    return DocumentIntelligenceClient(
        app_settings.document_intelligence,
        storage_service=storage_service,
        timeout=app_settings.http_timeout,
    )


async def get_llm_client(
    app_settings: Annotated[Settings, Depends(get_settings)]
) -> LanguageModelClient:
    """Get the provider-selected language model client.

    Raises:
        ConfigurationError: If the provider configuration is invalid
    """
    return create_llm_client_from_settings(
        app_settings.llm,
        timeout=app_settings.http_timeout,
        max_retries=app_settings.max_retries,
    )


async def get_analysis_orchestrator(
    app_settings: Annotated[Settings, Depends(get_settings)],
    document_intelligence: Annotated[DocumentIntelligenceClient, Depends(get_document_intelligence_client)],
    llm_client: Annotated[LanguageModelClient, Depends(get_llm_client)],
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        document_intelligence=document_intelligence,
        llm_client=llm_client,
        analysis_settings=app_settings.analysis,
        model_id=app_settings.document_intelligence.model_id,
    )


async def get_document_lifecycle_manager(
    app_settings: Annotated[Settings, Depends(get_settings)],
    document_repository: Annotated[DocumentRepository, Depends(get_document_repository)],
    analysis_repository: Annotated[AnalysisRepository, Depends(get_analysis_repository)],
    orchestrator: Annotated[AnalysisOrchestrator, Depends(get_analysis_orchestrator)],
) -> DocumentLifecycleManager:
    """Get the lifecycle manager; both repositories share the request session."""
    return DocumentLifecycleManager(
        document_repository=document_repository,
        analysis_repository=analysis_repository,
        orchestrator=orchestrator,
        analysis_settings=app_settings.analysis,
    )


async def get_chat_context_builder(
    app_settings: Annotated[Settings, Depends(get_settings)],
    project_repository: Annotated[ProjectRepository, Depends(get_project_repository)],
    document_repository: Annotated[DocumentRepository, Depends(get_document_repository)],
    chat_repository: Annotated[ChatRepository, Depends(get_chat_repository)],
    llm_client: Annotated[LanguageModelClient, Depends(get_llm_client)],
) -> ChatContextBuilder:
    return ChatContextBuilder(
        project_repository=project_repository,
        document_repository=document_repository,
        chat_repository=chat_repository,
        llm_client=llm_client,
        analysis_settings=app_settings.analysis,
    )
