"""Whisper transcription over DeepInfra's OpenAI-compatible audio endpoint."""

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI, OpenAIError

from src.errors import TranscriptionError
from src.ingestion.models import Transcript, TranscriptSegment

logger = logging.getLogger(__name__)


def render_timestamped_text(segments: list[TranscriptSegment]) -> str:
    """Render segments as ``"{start:.2f} - {end:.2f} {text}"`` lines.

    This rendering is the only view of the audio the classifier gets.
    """
    return "\n".join(f"{seg.start:.2f} - {seg.end:.2f} {seg.text.strip()}" for seg in segments)


class TranscriptionClient:
    """Send audio bytes to Whisper and return text plus timed segments.

    One attempt per call: the OpenAI client must be built with
    ``max_retries=0`` (see :func:`src.services.get_transcription_client`).
    """

    def __init__(self, client: OpenAI, model: str = "openai/whisper-large-v3") -> None:
        self._client = client
        self._model = model

    def transcribe(self, media_bytes: bytes, filename: str = "audio") -> Transcript:
        """Transcribe *media_bytes*.

        Raises:
            TranscriptionError: Service error or unparsable response body.
        """
        try:
            response = self._client.audio.transcriptions.create(
                model=self._model,
                file=(filename, media_bytes),
                response_format="verbose_json",
            )
        except OpenAIError as exc:
            raise TranscriptionError(f"Transcription service error: {exc}") from exc

        payload = response.model_dump() if hasattr(response, "model_dump") else response
        transcript = parse_transcription_payload(payload)
        logger.info(
            "Transcribed %d bytes into %d segments", len(media_bytes), len(transcript.segments)
        )
        return transcript


def parse_transcription_payload(payload: Any) -> Transcript:
    """Parse a ``verbose_json`` transcription body into a :class:`Transcript`.

    Segments are kept in the order the service produced them. A segment that
    ends before it starts, or starts before its predecessor, makes the body
    unparsable rather than being re-sorted.
    """
    if not isinstance(payload, dict):
        raise TranscriptionError(f"Unparsable transcription body: {type(payload).__name__}")

    error = payload.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else None
        raise TranscriptionError(f"Transcription failed: {message or error}")

    text = payload.get("text")
    if not isinstance(text, str):
        raise TranscriptionError("Unparsable transcription body: missing 'text'")

    segments: list[TranscriptSegment] = []
    for index, raw in enumerate(payload.get("segments") or []):
        try:
            segment = TranscriptSegment(
                start=float(raw["start"]),
                end=float(raw["end"]),
                text=str(raw["text"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TranscriptionError(f"Malformed segment at index {index}: {raw!r}") from exc

        if segment.start > segment.end:
            raise TranscriptionError(
                f"Segment {index} ends before it starts ({segment.start} > {segment.end})"
            )
        if segments and segment.start < segments[-1].start:
            raise TranscriptionError(f"Segment {index} is out of order (start {segment.start})")
        segments.append(segment)

    return Transcript(text=text, segments=segments)
