"""Document analysis pipeline: extraction, summarisation, scoring and insights."""

from audit_ai.services.analysis.confidence_scorer import ConfidenceScorer
from audit_ai.services.analysis.insight_extractor import InsightExtractor
from audit_ai.services.analysis.analysis_orchestrator import AnalysisOrchestrator

__all__ = ["ConfidenceScorer", "InsightExtractor", "AnalysisOrchestrator"]
