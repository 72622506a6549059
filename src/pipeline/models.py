"""Result container for a single pipeline run."""

from __future__ import annotations

from dataclasses import dataclass, field

from src.classification.models import ClassificationRecord, TokenUsage
from src.ingestion.models import Transcript
from src.pipeline_config import PipelineState


@dataclass
class PipelineResult:
    """Combined outcome of a run that got past transcription.

    ``status`` is ``DONE`` or ``DEGRADED``; fatal runs raise instead of
    returning a result. The transcript is always present.
    """

    status: PipelineState
    transcript: Transcript
    timings: dict[str, float] = field(default_factory=dict)
    classification: ClassificationRecord | None = None
    classification_error: str | None = None
    validation_issues: list[str] = field(default_factory=list)
    persistence_error: str | None = None
    history_entry_id: str | None = None
    usage: TokenUsage | None = None

    @property
    def whisper_time_seconds(self) -> float:
        return round(self.timings.get("transcribe", 0.0), 2)

    @property
    def gemini_time_seconds(self) -> float:
        return round(self.timings.get("classify", 0.0), 2)
