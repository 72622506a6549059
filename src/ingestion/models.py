"""Data models for media ingestion and transcription."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MediaAsset:
    """A stored media file handed to the pipeline.

    ``retain=False`` marks the asset as ephemeral: it is deleted once the
    pipeline finishes, whatever the outcome.
    """

    ref: str
    retain: bool = False


@dataclass(frozen=True)
class TranscriptSegment:
    """A contiguous span of audio with its transcribed text (seconds)."""

    start: float
    end: float
    text: str

    def to_dict(self) -> dict[str, float | str]:
        return {"start": self.start, "end": self.end, "text": self.text}


@dataclass
class Transcript:
    """Full transcription output: flat text plus ordered segments."""

    text: str
    segments: list[TranscriptSegment] = field(default_factory=list)
