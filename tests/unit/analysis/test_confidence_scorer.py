"""Tests for the extraction completeness score."""

import pytest

from audit_ai.schemas.extraction import ExtractedData, ExtractedTable
from audit_ai.services.analysis.confidence_scorer import ConfidenceScorer


@pytest.fixture
def scorer() -> ConfidenceScorer:
    return ConfidenceScorer()


def _table() -> ExtractedTable:
    return ExtractedTable(row_count=1, column_count=1, cells=[])


def test_empty_payload_scores_base(scorer):
    assert scorer.score(ExtractedData()) == 0.5


def test_tables_only(scorer):
    assert scorer.score(ExtractedData(tables=[_table()])) == 0.7


def test_key_values_only(scorer):
    assert scorer.score(ExtractedData(key_value_pairs={"Total": "10"})) == 0.7


def test_complete_payload_scores_one(scorer, sample_extracted_data):
    assert len(sample_extracted_data.content) > 100
    assert scorer.score(sample_extracted_data) == 1.0


def test_tables_and_key_values_without_long_content(scorer):
    data = ExtractedData(tables=[_table()], key_value_pairs={"a": "b"}, content="short")
    assert scorer.score(data) == 0.9


def test_content_length_threshold_is_strict(scorer):
    assert scorer.score(ExtractedData(content="x" * 100)) == 0.5
    assert scorer.score(ExtractedData(content="x" * 101)) == 0.6


def test_accepts_stored_camel_case_mapping(scorer):
    stored = {"tables": [{"rowCount": 1}], "keyValuePairs": {"k": "v"}, "content": "y" * 150}
    assert scorer.score(stored) == 1.0


def test_uninspectable_fields_earn_no_bonus(scorer):
    assert scorer.score(None) == 0.5
    assert scorer.score({"tables": None, "keyValuePairs": 42}) == 0.5
    assert scorer.score({"content": "z" * 200}) == 0.6


def test_score_stays_within_bounds(scorer, sample_extracted_data):
    for payload in (None, {}, ExtractedData(), sample_extracted_data):
        assert 0.5 <= scorer.score(payload) <= 1.0
