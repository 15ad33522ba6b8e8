"""Project chat assistant."""

from audit_ai.services.chat.chat_context_builder import ChatContextBuilder
from audit_ai.services.chat.suggested_questions import build_suggested_questions

__all__ = ["ChatContextBuilder", "build_suggested_questions"]
