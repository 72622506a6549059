"""Tests for schema and taxonomy validation of classification documents."""

from __future__ import annotations

from typing import Any

import pytest

from src.classification.validator import ResultValidator
from src.errors import ValidationError
from src.pipeline_config import TaxonomyPolicy

UNKNOWN_TRIPLE = {
    "Category": "Operational",
    "EventType": "Parking",
    "SubType": "Car Park Full",
    "Tags": ["parking"],
    "classifyConfidenceScore": 0.4,
    "classifyreason": "Customer mentions the car park.",
}


class TestValidRecords:
    def test_valid_record_passes(self, classification_payload: dict[str, Any]) -> None:
        outcome = ResultValidator().validate(classification_payload)
        assert outcome.issues == []
        assert outcome.record.TranscriptionID == "tx-001"
        assert len(outcome.record.Segments) == 2

    def test_empty_classification_list_is_kept(
        self, classification_payload: dict[str, Any]
    ) -> None:
        outcome = ResultValidator().validate(classification_payload)
        assert outcome.record.Segments[0].SegmentClassification == []

    def test_string_and_integer_ids_accepted(
        self, classification_payload: dict[str, Any]
    ) -> None:
        classification_payload["TranscriptionID"] = 42
        classification_payload["Segments"][0]["SegmentID"] = "seg-a"
        outcome = ResultValidator().validate(classification_payload)
        assert outcome.record.TranscriptionID == 42
        assert outcome.record.Segments[0].SegmentID == "seg-a"

    def test_unknown_extra_fields_ignored(self, classification_payload: dict[str, Any]) -> None:
        classification_payload["model_notes"] = "extra"
        assert ResultValidator().validate(classification_payload).issues == []


class TestTaxonomyPolicies:
    def test_drop_triple_removes_unknown_and_reports(
        self, classification_payload: dict[str, Any]
    ) -> None:
        segment = classification_payload["Segments"][1]
        segment["SegmentClassification"].append(UNKNOWN_TRIPLE)

        outcome = ResultValidator(TaxonomyPolicy.DROP_TRIPLE).validate(classification_payload)

        kept = outcome.record.Segments[1].SegmentClassification
        assert [m.SubType for m in kept] == ["Greeting"]
        assert len(outcome.issues) == 1
        assert "Segments.1" in outcome.issues[0]
        assert "Car Park Full" in outcome.issues[0]

    def test_drop_triple_keeps_segment_with_nothing_left(
        self, classification_payload: dict[str, Any]
    ) -> None:
        classification_payload["Segments"][1]["SegmentClassification"] = [UNKNOWN_TRIPLE]
        outcome = ResultValidator().validate(classification_payload)
        assert len(outcome.record.Segments) == 2
        assert outcome.record.Segments[1].SegmentClassification == []

    def test_near_miss_spelling_is_unknown(self, classification_payload: dict[str, Any]) -> None:
        match = classification_payload["Segments"][1]["SegmentClassification"][0]
        match["SubType"] = "greeting"
        outcome = ResultValidator().validate(classification_payload)
        assert outcome.record.Segments[1].SegmentClassification == []
        assert len(outcome.issues) == 1

    def test_reject_record_raises_with_issues(
        self, classification_payload: dict[str, Any]
    ) -> None:
        classification_payload["Segments"][1]["SegmentClassification"].append(UNKNOWN_TRIPLE)
        validator = ResultValidator(TaxonomyPolicy.REJECT_RECORD)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(classification_payload)
        assert len(exc_info.value.issues) == 1

    def test_reject_record_accepts_conforming_record(
        self, classification_payload: dict[str, Any]
    ) -> None:
        outcome = ResultValidator(TaxonomyPolicy.REJECT_RECORD).validate(classification_payload)
        assert outcome.issues == []


class TestSchemaViolations:
    def test_not_an_object(self) -> None:
        with pytest.raises(ValidationError, match="JSON object"):
            ResultValidator().validate([])

    def test_missing_field(self, classification_payload: dict[str, Any]) -> None:
        del classification_payload["overall_AudioSummary"]
        with pytest.raises(ValidationError) as exc_info:
            ResultValidator().validate(classification_payload)
        assert any("overall_AudioSummary" in issue for issue in exc_info.value.issues)

    def test_wrong_type_is_not_coerced(self, classification_payload: dict[str, Any]) -> None:
        classification_payload["Audio_Total_Segments"] = "2"
        with pytest.raises(ValidationError) as exc_info:
            ResultValidator().validate(classification_payload)
        assert any("Audio_Total_Segments" in issue for issue in exc_info.value.issues)

    def test_confidence_out_of_range(self, classification_payload: dict[str, Any]) -> None:
        match = classification_payload["Segments"][1]["SegmentClassification"][0]
        match["classifyConfidenceScore"] = 1.5
        with pytest.raises(ValidationError) as exc_info:
            ResultValidator().validate(classification_payload)
        assert any("classifyConfidenceScore" in issue for issue in exc_info.value.issues)

    def test_bad_yes_no_value(self, classification_payload: dict[str, Any]) -> None:
        classification_payload["overall_EscalationDetected"] = "maybe"
        with pytest.raises(ValidationError):
            ResultValidator().validate(classification_payload)

    def test_sentiment_out_of_range(self, classification_payload: dict[str, Any]) -> None:
        classification_payload["Segments"][0]["SentimentScore"] = -2
        with pytest.raises(ValidationError):
            ResultValidator().validate(classification_payload)
