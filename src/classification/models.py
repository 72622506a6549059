"""Schema of the classification document returned by the LLM.

Field names follow the JSON wire contract verbatim, which is why they do not
use snake_case. Models are strict: values of the wrong type are reported,
never coerced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

YesNo = Literal["yes", "no"]
Level = Literal["low", "medium", "high"]


class _WireModel(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")


class TaxonomyMatch(_WireModel):
    """One taxonomy triple assigned to a segment."""

    Category: str
    EventType: str
    SubType: str
    Tags: list[str]
    classifyConfidenceScore: float = Field(ge=0.0, le=1.0)
    classifyreason: str


class SegmentRecord(_WireModel):
    """Per-segment analysis; ``SegmentClassification`` may be empty."""

    SegmentID: str | int
    Segment_Duration: float
    Starting_Second: float
    Ending_Second: float
    Speaker: str
    SpeakerType: Literal["Customer", "Employee", "Unknown"]
    Segment_original: str
    Segment_English_Translation: str
    Segment_Summary: str
    SegmentClassification: list[TaxonomyMatch]
    KeySentences: list[str]
    CriticalLevel: Level
    LanguageSpoken: str
    DetectedIntent: list[str]
    EnvironmentNoiseLevel: Level
    SentimentScore: float = Field(ge=-1.0, le=1.0)
    EmotionalTone: str


class ClassificationRecord(_WireModel):
    """Validated classification of one recording."""

    TranscriptionID: str | int
    Recording_StationID: str | int
    Audio_Original_Transcript: str
    Audio_English_Translation: str
    Audio_Total_Segments: int
    Audio_Total_Words: int
    Audio_Total_Duration: float
    overall_DominantLanguage: str
    overall_AudioSummary: str
    overall_EventsKeyPoints: list[str]
    overall_TopKeywords: list[str]
    overall_CriticalEventPresent: YesNo
    overall_EscalationDetected: YesNo
    overall_DetectedNamedEntity: list[str]
    Segments: list[SegmentRecord]


class TokenUsage(_WireModel):
    """Token counts reported by the LLM for cost accounting."""

    promptTokens: int
    candidatesTokens: int
    totalTokens: int


class HistoryEntry(ClassificationRecord):
    """A ledger entry: the record plus identity, creation time and usage."""

    id: str
    timestamp: str
    usage: TokenUsage | None = None


@dataclass
class RawClassification:
    """Parsed-but-unvalidated LLM output."""

    payload: dict[str, Any]
    raw_text: str
    usage: TokenUsage | None = None


@dataclass
class ValidationOutcome:
    """Validated record plus any taxonomy issues found along the way."""

    record: ClassificationRecord
    issues: list[str] = field(default_factory=list)
