"""Keyword heuristics that turn an AI summary into red flags and highlights."""

import re
from typing import Any, List, Tuple

# Checked in this order; output order follows it, not the order in the text
RED_FLAG_RULES: Tuple[Tuple[str, str], ...] = (
    ("discrepanc", "Potential discrepancies detected"),
    ("inconsisten", "Inconsistencies found"),
    ("unusual", "Unusual patterns identified"),
    ("concern", "Areas of concern noted"),
)

HIGHLIGHT_KEYWORDS: Tuple[str, ...] = ("key", "important", "significant")
HIGHLIGHT_MIN_LENGTH = 20
MAX_HIGHLIGHTS = 5

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


class InsightExtractor:
    """Derives red flags and highlights from summary text.

    Both methods return an empty list for empty or non-string input and never raise.
    """

    def red_flags(self, summary: Any) -> List[str]:
        """Return the fixed messages whose trigger substring appears in the summary."""
        if not isinstance(summary, str) or not summary:
            return []

        lowered = summary.lower()
        return [message for trigger, message in RED_FLAG_RULES if trigger in lowered]

    def highlights(self, summary: Any) -> List[str]:
        """Return up to five sentences that mention a highlight keyword.

        A sentence qualifies when its untrimmed length exceeds 20 characters
        and it contains "key", "important" or "significant" (case-insensitive).
        Matches keep their order in the summary and are returned trimmed.
        """
        if not isinstance(summary, str) or not summary:
            return []

        highlights: List[str] = []
        for sentence in _SENTENCE_SPLIT.split(summary):
            if len(sentence) <= HIGHLIGHT_MIN_LENGTH:
                continue
            lowered = sentence.lower()
            if any(keyword in lowered for keyword in HIGHLIGHT_KEYWORDS):
                highlights.append(sentence.strip())
                if len(highlights) == MAX_HIGHLIGHTS:
                    break

        return highlights
