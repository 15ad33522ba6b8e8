"""Project-scoped question answering grounded in stored analyses."""

import asyncio
from typing import List, Sequence
from uuid import UUID

from audit_ai.core.config import AnalysisSettings
from audit_ai.core.exceptions import UpstreamServiceError, ValidationError
from audit_ai.core.llm_client import LanguageModelClient
from audit_ai.database.models import ChatTurn, Document, Project
from audit_ai.repositories.chat_repository import ChatRepository
from audit_ai.repositories.document_repository import DocumentRepository
from audit_ai.repositories.project_repository import ProjectRepository
from audit_ai.schemas.chat import ChatAnswer, ChatHistoryResponse, ChatTurnResponse
from audit_ai.services.access_service import load_accessible_project
from audit_ai.services.base_service import BaseService
from audit_ai.services.chat.suggested_questions import build_suggested_questions
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

ASSISTANT_PERSONA = (
    "You are Esus, an AI audit assistant. Answer questions about financial documents "
    "and audit findings based on the provided context. Be precise and professional, "
    "and call out any compliance or risk issues."
)

MAX_CONTEXT_TURNS = 5


class ChatContextBuilder(BaseService):
    """Answers one question per call from the project's analyses and recent history.

    Every call is a single stateless completion; the conversation memory is
    the last few stored turns rendered into the system prompt.
    """

    def __init__(
        self,
        project_repository: ProjectRepository,
        document_repository: DocumentRepository,
        chat_repository: ChatRepository,
        llm_client: LanguageModelClient,
        analysis_settings: AnalysisSettings,
    ):
        super().__init__()
        self.projects = project_repository
        self.documents = document_repository
        self.chat = chat_repository
        self.llm_client = llm_client
        self.settings = analysis_settings

    async def ask(self, project_id: UUID, user_id: UUID, question: str) -> ChatAnswer:
        """Answer ``question`` in the context of ``project_id``.

        Raises:
            ValidationError: Blank question
            ProjectNotFoundError: Unknown project
            AccessDeniedError: User neither owns nor is assigned to the project
            UpstreamServiceError: The completion failed or timed out
        """
        return await self.execute(project_id, user_id, question)

    async def run(self, project_id: UUID, user_id: UUID, question: str) -> ChatAnswer:
        project = await load_accessible_project(self.projects, project_id, user_id)
        # Access is checked first: outsiders get 403 even for a blank question
        if not isinstance(question, str) or not question.strip():
            raise ValidationError("Question must not be empty")

        documents = [
            doc for doc in await self.documents.list_analyzed_with_analysis(project_id)
            if doc.analysis is not None
        ]
        recent_turns = await self.chat.get_recent(
            project_id, min(self.settings.chat_history_turns, MAX_CONTEXT_TURNS)
        )

        system_prompt = self.build_system_prompt(project, documents, recent_turns)
        answer = await self._complete(system_prompt, question)

        context_documents = [doc.id for doc in documents]
        chat_id = await self._save_turn(project_id, user_id, question, answer, context_documents)

        return ChatAnswer(
            answer=answer,
            chat_id=chat_id,
            context_documents=context_documents,
            context_document_count=len(context_documents),
        )

    def build_system_prompt(
        self,
        project: Project,
        documents: Sequence[Document],
        recent_turns: Sequence[ChatTurn],
    ) -> str:
        """Render the persona, project facts, analyses and recent turns."""
        limit = self.settings.chat_summary_char_limit
        lines: List[str] = [ASSISTANT_PERSONA, "", "Project Information:"]
        lines.append(f"- Project: {project.name}")
        lines.append(f"- Client: {project.client_name or 'Not specified'}")
        lines.append(f"- Status: {project.status}")
        if project.description:
            lines.append(f"- Description: {project.description}")

        lines.extend(["", "Document Analysis Context:"])
        if not documents:
            lines.append("No analyzed documents are available for this project yet.")
        for index, doc in enumerate(documents, start=1):
            analysis = doc.analysis
            lines.append(f"\nDocument {index}: {doc.original_name}")
            lines.append(f"- Summary: {(analysis.ai_summary or 'No summary available')[:limit]}")
            lines.append(f"- Red Flags: {', '.join(analysis.red_flags) if analysis.red_flags else 'None'}")
            lines.append(f"- Highlights: {', '.join(analysis.highlights) if analysis.highlights else 'None'}")

        if recent_turns:
            lines.extend(["", "Recent conversation (most recent first):"])
            for turn in list(recent_turns)[:MAX_CONTEXT_TURNS]:
                lines.append(f"Q: {turn.question}")
                lines.append(f"A: {turn.answer}")

        return "\n".join(lines)

    async def get_history(self, project_id: UUID, user_id: UUID, limit: int = 50) -> ChatHistoryResponse:
        """Stored turns of a project, oldest first."""
        await load_accessible_project(self.projects, project_id, user_id)
        turns = await self.chat.get_history(project_id, limit)
        messages = [ChatTurnResponse.model_validate(turn) for turn in turns]
        return ChatHistoryResponse(total=len(messages), messages=messages)

    async def suggested_questions(self, project_id: UUID, user_id: UUID) -> List[str]:
        project = await load_accessible_project(self.projects, project_id, user_id)
        documents = await self.documents.list_analyzed_with_analysis(project_id)
        return build_suggested_questions(project, documents)

    async def _complete(self, system_prompt: str, question: str) -> str:
        timeout = self.settings.chat_timeout_seconds
        try:
            answer = await asyncio.wait_for(
                self.llm_client.complete(
                    system_prompt=system_prompt,
                    user_prompt=question,
                    max_tokens=self.settings.chat_max_tokens,
                    temperature=self.settings.chat_temperature,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            LOGGER.error(f"Chat completion timed out after {timeout}s")
            raise UpstreamServiceError(f"Assistant timed out after {timeout}s", original_error=e) from e
        except UpstreamServiceError:
            raise
        except Exception as e:
            LOGGER.error(f"Chat completion failed: {e}", exc_info=True)
            raise UpstreamServiceError(f"Assistant request failed: {e}", original_error=e) from e

        if not answer or not answer.strip():
            raise UpstreamServiceError("Assistant returned an empty answer")
        return answer

    async def _save_turn(
        self,
        project_id: UUID,
        user_id: UUID,
        question: str,
        answer: str,
        context_documents: List[UUID],
    ) -> UUID | None:
        """Persist the turn; a failed write is logged and yields ``None``."""
        try:
            turn = await self.chat.create(
                project_id=project_id,
                user_id=user_id,
                question=question,
                answer=answer,
                context_documents=context_documents,
            )
            return turn.id
        except Exception as e:
            LOGGER.error(
                f"Failed to store chat turn: {e}",
                exc_info=True,
                extra={"project_id": str(project_id), "user_id": str(user_id)},
            )

        try:
            await self.chat.rollback()
        except Exception as e:
            LOGGER.error(f"Rollback after failed chat turn write also failed: {e}", exc_info=True)
        return None
