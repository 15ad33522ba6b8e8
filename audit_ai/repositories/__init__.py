from audit_ai.repositories.base_repository import BaseRepository
from audit_ai.repositories.document_repository import DocumentRepository
from audit_ai.repositories.analysis_repository import AnalysisRepository
from audit_ai.repositories.chat_repository import ChatRepository
from audit_ai.repositories.project_repository import ProjectRepository
from audit_ai.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "AnalysisRepository",
    "ChatRepository",
    "ProjectRepository",
    "UserRepository",
]
