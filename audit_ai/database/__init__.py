"""Database module for SQLAlchemy models."""

from audit_ai.database.models import (
    AnalysisResult,
    ChatTurn,
    Document,
    DocumentStatus,
    Project,
    User,
)

__all__ = [
    "AnalysisResult",
    "ChatTurn",
    "Document",
    "DocumentStatus",
    "Project",
    "User",
]
