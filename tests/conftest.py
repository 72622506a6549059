"""Shared fixtures: a valid classification document and pipeline fakes."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from src.classification.models import RawClassification
from src.errors import IngestionError
from src.ingestion.models import Transcript, TranscriptSegment


def build_classification_payload() -> dict[str, Any]:
    """A two-segment document that satisfies the schema and the taxonomy."""
    return {
        "TranscriptionID": "tx-001",
        "Recording_StationID": 7,
        "Audio_Original_Transcript": "Hello. Welcome.",
        "Audio_English_Translation": "Hello. Welcome.",
        "Audio_Total_Segments": 2,
        "Audio_Total_Words": 2,
        "Audio_Total_Duration": 5.0,
        "overall_DominantLanguage": "English",
        "overall_AudioSummary": "Cashier greets a customer at the till.",
        "overall_EventsKeyPoints": ["Customer greeted"],
        "overall_TopKeywords": ["hello", "welcome"],
        "overall_CriticalEventPresent": "no",
        "overall_EscalationDetected": "no",
        "overall_DetectedNamedEntity": [],
        "Segments": [
            {
                "SegmentID": 1,
                "Segment_Duration": 2.5,
                "Starting_Second": 0.0,
                "Ending_Second": 2.5,
                "Speaker": "Speaker 1",
                "SpeakerType": "Customer",
                "Segment_original": "Hello",
                "Segment_English_Translation": "Hello",
                "Segment_Summary": "Customer says hello.",
                "SegmentClassification": [],
                "KeySentences": ["Hello"],
                "CriticalLevel": "low",
                "LanguageSpoken": "English",
                "DetectedIntent": ["greeting"],
                "EnvironmentNoiseLevel": "low",
                "SentimentScore": 0.2,
                "EmotionalTone": "neutral",
            },
            {
                "SegmentID": 2,
                "Segment_Duration": 2.5,
                "Starting_Second": 2.5,
                "Ending_Second": 5.0,
                "Speaker": "Speaker 2",
                "SpeakerType": "Employee",
                "Segment_original": "Welcome",
                "Segment_English_Translation": "Welcome",
                "Segment_Summary": "Cashier welcomes the customer.",
                "SegmentClassification": [
                    {
                        "Category": "Customer Service",
                        "EventType": "Cashier Engagement",
                        "SubType": "Greeting",
                        "Tags": ["greeting"],
                        "classifyConfidenceScore": 0.9,
                        "classifyreason": "Employee welcomes the customer.",
                    }
                ],
                "KeySentences": ["Welcome"],
                "CriticalLevel": "low",
                "LanguageSpoken": "English",
                "DetectedIntent": ["welcome"],
                "EnvironmentNoiseLevel": "medium",
                "SentimentScore": 0.6,
                "EmotionalTone": "friendly",
            },
        ],
    }


def build_transcript() -> Transcript:
    return Transcript(
        text="Hello Welcome",
        segments=[
            TranscriptSegment(start=0.0, end=2.5, text=" Hello"),
            TranscriptSegment(start=2.5, end=5.0, text=" Welcome"),
        ],
    )


@pytest.fixture
def classification_payload() -> dict[str, Any]:
    return build_classification_payload()


@pytest.fixture
def transcript() -> Transcript:
    return build_transcript()


@pytest.fixture
def media_store() -> MagicMock:
    """MediaStore double: every fetch returns a few fake MP3 bytes."""
    store = MagicMock()
    store.fetch.return_value = b"\xff\xfb\x90\x00" + b"\x00" * 32
    return store


@pytest.fixture
def unreachable_media_store() -> MagicMock:
    store = MagicMock()
    store.fetch.side_effect = IngestionError("Could not fetch media asset 'missing.mp3'")
    return store


@pytest.fixture
def transcriber(transcript: Transcript) -> MagicMock:
    client = MagicMock()
    client.transcribe.return_value = transcript
    return client


@pytest.fixture
def classifier(classification_payload: dict[str, Any]) -> MagicMock:
    client = MagicMock()
    client.classify.return_value = RawClassification(
        payload=classification_payload,
        raw_text="{}",
    )
    return client
