"""Deterministic completeness score for an extraction payload."""

from typing import Any, Mapping, Union

from audit_ai.schemas.extraction import ExtractedData
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

BASE_SCORE = 0.5
TABLES_BONUS = 0.2
KEY_VALUE_BONUS = 0.2
CONTENT_BONUS = 0.1
CONTENT_MIN_LENGTH = 100
MAX_SCORE = 1.0


class ConfidenceScorer:
    """Scores how complete an extraction is, on a 0.0-1.0 scale.

    This is a heuristic over the payload shape, not a model probability:
    0.5 base, +0.2 for tables, +0.2 for key-value pairs, +0.1 for more than
    100 characters of content, capped at 1.0.

    ``score`` never raises. A field that cannot be inspected simply does not
    earn its bonus.
    """

    def score(self, extracted_data: Union[ExtractedData, Mapping[str, Any], None]) -> float:
        """Compute the confidence score.

        Args:
            extracted_data: Typed payload or the raw stored mapping

        Returns:
            Score between 0.5 and 1.0, rounded to two decimals
        """
        score = BASE_SCORE

        if self._has_tables(extracted_data):
            score += TABLES_BONUS
        if self._has_key_values(extracted_data):
            score += KEY_VALUE_BONUS
        if self._has_content(extracted_data):
            score += CONTENT_BONUS

        # Float addition drifts (0.7 + 0.2 == 0.8999...), round to the stored precision
        return round(min(score, MAX_SCORE), 2)

    @staticmethod
    def _field(extracted_data: Any, attr: str, key: str) -> Any:
        if isinstance(extracted_data, ExtractedData):
            return getattr(extracted_data, attr)
        return extracted_data[key]

    def _has_tables(self, extracted_data: Any) -> bool:
        try:
            return len(self._field(extracted_data, "tables", "tables")) > 0
        except Exception:
            LOGGER.debug("Tables not inspectable, bonus not earned")
            return False

    def _has_key_values(self, extracted_data: Any) -> bool:
        try:
            return len(self._field(extracted_data, "key_value_pairs", "keyValuePairs")) > 0
        except Exception:
            LOGGER.debug("Key-value pairs not inspectable, bonus not earned")
            return False

    def _has_content(self, extracted_data: Any) -> bool:
        try:
            return len(self._field(extracted_data, "content", "content")) > CONTENT_MIN_LENGTH
        except Exception:
            LOGGER.debug("Content not inspectable, bonus not earned")
            return False
