"""Runs the extraction -> summary -> scoring -> insights pipeline for one document."""

import asyncio
import json
import time
from typing import Optional

from audit_ai.core.config import AnalysisSettings
from audit_ai.core.document_intelligence_client import DocumentIntelligenceClient
from audit_ai.core.exceptions import UpstreamServiceError
from audit_ai.core.llm_client import LanguageModelClient
from audit_ai.schemas.analysis import AnalysisOutcome
from audit_ai.schemas.extraction import ExtractedData
from audit_ai.services.analysis.confidence_scorer import ConfidenceScorer
from audit_ai.services.analysis.insight_extractor import InsightExtractor
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

FALLBACK_SUMMARY = "AI analysis unavailable - using extracted data only"

ANALYSIS_SYSTEM_PROMPT = (
    "You are a financial auditing expert. Analyze the provided document data "
    "and provide detailed insights."
)

ANALYSIS_USER_PROMPT = """Analyze the following document data and provide:

1. A comprehensive summary of the document
2. Key financial insights and figures
3. Red flags, discrepancies or areas of concern
4. Important highlights worth the auditor's attention

Document Data:
{document_data}
"""


class AnalysisOrchestrator:
    """Composes the external adapters and the local heuristics into one analysis.

    Extraction is mandatory: its failure or timeout aborts the run. The summary
    is best effort: any failure, timeout or empty answer is replaced by
    ``FALLBACK_SUMMARY`` and the run continues. Nothing here touches the database.
    """

    def __init__(
        self,
        document_intelligence: DocumentIntelligenceClient,
        llm_client: LanguageModelClient,
        analysis_settings: AnalysisSettings,
        model_id: str = "prebuilt-document",
        scorer: Optional[ConfidenceScorer] = None,
        extractor: Optional[InsightExtractor] = None,
    ):
        self.document_intelligence = document_intelligence
        self.llm_client = llm_client
        self.settings = analysis_settings
        self.model_id = model_id
        self.scorer = scorer or ConfidenceScorer()
        self.extractor = extractor or InsightExtractor()

    async def run(self, storage_locator: str) -> AnalysisOutcome:
        """Analyze the document stored at ``storage_locator``.

        Args:
            storage_locator: Storage path or URL of the uploaded file

        Returns:
            AnalysisOutcome ready to be persisted

        Raises:
            UpstreamServiceError: If extraction fails or times out
        """
        started = time.perf_counter()

        extracted_data = await self._extract(storage_locator)
        ai_summary, degraded = await self._summarize(extracted_data)

        confidence_score = self.scorer.score(extracted_data)
        red_flags = self.extractor.red_flags(ai_summary)
        highlights = self.extractor.highlights(ai_summary)

        processing_time_ms = int((time.perf_counter() - started) * 1000)

        LOGGER.info(
            "Analysis pipeline completed",
            extra={
                "confidence_score": confidence_score,
                "red_flags": len(red_flags),
                "highlights": len(highlights),
                "summary_degraded": degraded,
                "processing_time_ms": processing_time_ms,
            },
        )

        return AnalysisOutcome(
            extracted_data=extracted_data,
            ai_summary=ai_summary,
            confidence_score=confidence_score,
            red_flags=red_flags,
            highlights=highlights,
            processing_time_ms=processing_time_ms,
            summary_degraded=degraded,
        )

    async def _extract(self, storage_locator: str) -> ExtractedData:
        timeout = self.settings.extraction_timeout_seconds
        try:
            return await asyncio.wait_for(
                self.document_intelligence.analyze(storage_locator, self.model_id),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            LOGGER.error(f"Document extraction timed out after {timeout}s")
            raise UpstreamServiceError(
                f"Document extraction timed out after {timeout}s", original_error=e
            ) from e
        except UpstreamServiceError:
            raise
        except Exception as e:
            LOGGER.error(f"Document extraction failed: {e}", exc_info=True)
            raise UpstreamServiceError(f"Document extraction failed: {e}", original_error=e) from e

    async def _summarize(self, extracted_data: ExtractedData) -> tuple[str, bool]:
        """Return ``(summary, degraded)``."""
        user_prompt = ANALYSIS_USER_PROMPT.format(
            document_data=json.dumps(extracted_data.to_storage(), indent=2)
        )
        timeout = self.settings.summary_timeout_seconds

        try:
            summary = await asyncio.wait_for(
                self.llm_client.complete(
                    system_prompt=ANALYSIS_SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                    max_tokens=self.settings.summary_max_tokens,
                    temperature=self.settings.summary_temperature,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            LOGGER.warning(f"Summary generation timed out after {timeout}s, using fallback summary")
            return FALLBACK_SUMMARY, True
        except Exception as e:
            LOGGER.warning(f"Summary generation failed, using fallback summary: {e}", exc_info=True)
            return FALLBACK_SUMMARY, True

        if not summary or not summary.strip():
            LOGGER.warning("Summary generation returned empty text, using fallback summary")
            return FALLBACK_SUMMARY, True

        return summary, False
