"""Error taxonomy shared by every pipeline stage.

Ingestion and transcription errors are fatal and reach the caller unchanged.
Everything else is caught at its stage boundary and recorded on the result.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    stage: str = "pipeline"


class IngestionError(PipelineError):
    """The media asset could not be fetched (unreachable or empty)."""

    stage = "ingesting"


class TranscriptionError(PipelineError):
    """The speech-to-text service failed or returned an unparsable body."""

    stage = "transcribing"


class ClassificationError(PipelineError):
    """The LLM call failed or its output was not a JSON object."""

    stage = "classifying"


class ValidationError(PipelineError):
    """The classification document violates the schema or the taxonomy."""

    stage = "classifying"

    def __init__(self, message: str, issues: list[str] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []


class PersistenceError(PipelineError):
    """The history ledger could not be read or written."""

    stage = "persisting"


class LedgerConflictError(PersistenceError):
    """A conditional ledger write lost against a concurrent writer."""


class CleanupError(PipelineError):
    """Best-effort deletion of an ephemeral media asset failed."""

    stage = "cleanup"
