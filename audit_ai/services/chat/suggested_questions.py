"""Canned starter questions for the project assistant."""

from typing import List, Sequence

from audit_ai.database.models import Document, Project

MAX_SUGGESTED_QUESTIONS = 8

RED_FLAG_QUESTIONS = (
    "What are the most critical red flags found?",
    "How should I address the identified issues?",
)
INVOICE_QUESTIONS = (
    "What is the total invoice amount for this period?",
    "Are there any invoice discrepancies?",
)
FINANCIAL_STATEMENT_QUESTIONS = (
    "What is the company's current financial position?",
    "How does this compare to previous periods?",
)


def build_suggested_questions(project: Project, documents: Sequence[Document]) -> List[str]:
    """Suggest up to eight questions from the project's analyzed documents.

    Four general questions are always present; pairs are added when any
    analysis has red flags, when a document name mentions "invoice", and when
    one mentions "financial" or "statement".
    """
    client = project.client_name or project.name
    questions = [
        f"What are the key financial highlights for {client}?",
        "Are there any compliance issues I should be aware of?",
        "What are the main risk factors identified in the documents?",
        "Can you summarize the financial performance?",
    ]

    if any(doc.analysis is not None and doc.analysis.red_flags for doc in documents):
        questions.extend(RED_FLAG_QUESTIONS)

    names = [(doc.original_name or "").lower() for doc in documents]
    if any("invoice" in name for name in names):
        questions.extend(INVOICE_QUESTIONS)
    if any("financial" in name or "statement" in name for name in names):
        questions.extend(FINANCIAL_STATEMENT_QUESTIONS)

    return questions[:MAX_SUGGESTED_QUESTIONS]
