"""Tests for red flag and highlight heuristics."""

import pytest

from audit_ai.services.analysis.insight_extractor import InsightExtractor


@pytest.fixture
def extractor() -> InsightExtractor:
    return InsightExtractor()


class TestRedFlags:

    def test_follow_fixed_rule_order(self, extractor):
        summary = "There are concerns about the ledger and several discrepancies in March."
        assert extractor.red_flags(summary) == [
            "Potential discrepancies detected",
            "Areas of concern noted",
        ]

    def test_all_rules(self, extractor):
        summary = "Unusual entries, an inconsistency, a discrepancy and one concern."
        assert extractor.red_flags(summary) == [
            "Potential discrepancies detected",
            "Inconsistencies found",
            "Unusual patterns identified",
            "Areas of concern noted",
        ]

    def test_case_insensitive(self, extractor):
        assert extractor.red_flags("UNUSUAL VOLUME OF REFUNDS") == ["Unusual patterns identified"]

    def test_clean_summary_has_no_flags(self, extractor):
        assert extractor.red_flags("Revenue grew in line with forecasts.") == []

    @pytest.mark.parametrize("value", [None, "", 42, ["discrepancy"]])
    def test_non_text_input(self, extractor, value):
        assert extractor.red_flags(value) == []


class TestHighlights:

    def test_keeps_keyword_sentences_in_order(self, extractor):
        summary = (
            "This is a key finding about revenue. Short key. "
            "Another significant change happened here! Nothing here at all matters much."
        )
        assert extractor.highlights(summary) == [
            "This is a key finding about revenue",
            "Another significant change happened here",
        ]

    def test_caps_at_five(self, extractor):
        summary = " ".join(f"The key metric number {i} remained stable." for i in range(7))
        highlights = extractor.highlights(summary)
        assert len(highlights) == 5
        assert highlights[0] == "The key metric number 0 remained stable"

    def test_length_measured_before_trimming(self, extractor):
        # " keyxxx..." is 21 characters untrimmed, 20 trimmed
        summary = "Intro. " + "key" + "x" * 17
        assert extractor.highlights(summary) == ["key" + "x" * 17]

    def test_short_keyword_sentence_is_skipped(self, extractor):
        assert extractor.highlights("Important note!") == []

    def test_keywords_are_case_insensitive(self, extractor):
        assert extractor.highlights("IMPORTANT: cash reserves doubled?") == [
            "IMPORTANT: cash reserves doubled"
        ]

    @pytest.mark.parametrize("value", [None, "", 3.14])
    def test_non_text_input(self, extractor, value):
        assert extractor.highlights(value) == []
