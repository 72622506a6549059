"""Pydantic request/response schemas for the Retail Audio Intelligence API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.classification.models import ClassificationRecord, TokenUsage
from src.ingestion.models import TranscriptSegment
from src.pipeline.models import PipelineResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProcessRequest(_CamelModel):
    """Request body for the /api/process endpoint."""

    media_ref: str
    retain: bool = False


class SegmentResponse(BaseModel):
    """A single time-stamped transcript segment."""

    start: float
    end: float
    text: str


def _segments(segments: list[TranscriptSegment]) -> list[SegmentResponse]:
    return [SegmentResponse(start=s.start, end=s.end, text=s.text) for s in segments]


class ProcessResponse(_CamelModel):
    """Response body for the /api/process endpoint."""

    status: str
    text: str
    segments: list[SegmentResponse]
    whisper_time_seconds: float
    gemini_time_seconds: float
    timings: dict[str, float] = {}
    classification: ClassificationRecord | None = None
    classification_error: str | None = None
    validation_issues: list[str] = []
    persistence_error: str | None = None
    history_entry_id: str | None = None
    usage: TokenUsage | None = None

    @classmethod
    def from_result(cls, result: PipelineResult) -> ProcessResponse:
        return cls(
            status=result.status.value,
            text=result.transcript.text,
            segments=_segments(result.transcript.segments),
            whisper_time_seconds=result.whisper_time_seconds,
            gemini_time_seconds=result.gemini_time_seconds,
            timings={stage: round(seconds, 3) for stage, seconds in result.timings.items()},
            classification=result.classification,
            classification_error=result.classification_error,
            validation_issues=result.validation_issues,
            persistence_error=result.persistence_error,
            history_entry_id=result.history_entry_id,
            usage=result.usage,
        )


class TranscribeResponse(_CamelModel):
    """Response body for the /api/transcribe endpoint."""

    text: str
    segments: list[SegmentResponse]
    whisper_time_seconds: float


class ErrorResponse(BaseModel):
    """Body returned when a pipeline run fails fatally."""

    error: str
