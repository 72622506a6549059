"""End-to-end pipeline: fetch -> transcribe -> classify -> validate -> persist.

State machine per run::

    INGESTING -> TRANSCRIBING -> CLASSIFYING -> PERSISTING -> DONE
                                      |             |
                                      +-> DEGRADED <+

Failures while ingesting or transcribing are fatal (``FAILED``) and the
error is re-raised unchanged. Classification, validation and persistence
failures degrade the result but never discard the transcript. An ephemeral
media asset is deleted on every exit path.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Iterator
from pathlib import PurePosixPath
from urllib.parse import urlparse

from src.classification.classifier import ClassificationClient
from src.classification.models import ClassificationRecord, TokenUsage
from src.classification.validator import ResultValidator
from src.errors import (
    ClassificationError,
    CleanupError,
    IngestionError,
    PersistenceError,
    TranscriptionError,
    ValidationError,
)
from src.history.ledger import HistoryLedger
from src.ingestion.models import MediaAsset, Transcript
from src.ingestion.storage import MediaStore
from src.ingestion.transcription import TranscriptionClient, render_timestamped_text
from src.pipeline.models import PipelineResult
from src.pipeline_config import PipelineState

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _timed(timings: dict[str, float], stage: str) -> Iterator[None]:
    """Record wall-clock seconds for *stage*, even if it raises."""
    started = time.perf_counter()
    try:
        yield
    finally:
        timings[stage] = time.perf_counter() - started


def _upload_filename(ref: str) -> str:
    """Basename of the asset; Whisper infers the audio format from its extension."""
    return PurePosixPath(urlparse(ref).path).name or "audio"


class PipelineOrchestrator:
    """Compose the stages for one media asset at a time.

    Each call to :meth:`process` is independent; stages inside a call run
    strictly in order because every stage consumes the previous one's output.
    Blocking SDK calls are pushed to worker threads.
    """

    def __init__(
        self,
        media_store: MediaStore,
        transcriber: TranscriptionClient,
        classifier: ClassificationClient,
        validator: ResultValidator,
        ledger: HistoryLedger,
    ) -> None:
        self._media = media_store
        self._transcriber = transcriber
        self._classifier = classifier
        self._validator = validator
        self._ledger = ledger

    async def process(self, asset: MediaAsset) -> PipelineResult:
        """Run the whole pipeline for *asset*.

        Raises:
            IngestionError: The asset could not be fetched.
            TranscriptionError: Speech-to-text failed.
        """
        timings: dict[str, float] = {}

        async with self._asset_lease(asset):
            try:
                transcript = await self._ingest_and_transcribe(asset, timings)
            except (IngestionError, TranscriptionError) as exc:
                self._transition(asset, PipelineState.FAILED, f"while {exc.stage}: {exc}")
                raise

            result = PipelineResult(
                status=PipelineState.DONE,
                transcript=transcript,
                timings=timings,
            )
            record = await self._classify(asset, transcript, result)
            if record is not None:
                await self._persist(asset, record, result)

            self._transition(asset, result.status)
            return result

    async def _ingest_and_transcribe(
        self,
        asset: MediaAsset,
        timings: dict[str, float],
    ) -> Transcript:
        self._transition(asset, PipelineState.INGESTING)
        with _timed(timings, "ingest"):
            media_bytes = await asyncio.to_thread(self._media.fetch, asset.ref)

        self._transition(asset, PipelineState.TRANSCRIBING)
        with _timed(timings, "transcribe"):
            return await asyncio.to_thread(
                self._transcriber.transcribe, media_bytes, _upload_filename(asset.ref)
            )

    async def _classify(
        self,
        asset: MediaAsset,
        transcript: Transcript,
        result: PipelineResult,
    ) -> ClassificationRecord | None:
        self._transition(asset, PipelineState.CLASSIFYING)
        timestamped_text = render_timestamped_text(transcript.segments)

        with _timed(result.timings, "classify"):
            try:
                raw = await asyncio.to_thread(self._classifier.classify, timestamped_text)
                result.usage = raw.usage
                outcome = self._validator.validate(raw.payload)
            except ValidationError as exc:
                result.validation_issues = list(exc.issues)
                self._degrade(asset, result, f"Classification rejected: {exc}")
                return None
            except ClassificationError as exc:
                self._degrade(asset, result, str(exc))
                return None

        result.classification = outcome.record
        result.validation_issues = outcome.issues
        return outcome.record

    async def _persist(
        self,
        asset: MediaAsset,
        record: ClassificationRecord,
        result: PipelineResult,
    ) -> None:
        self._transition(asset, PipelineState.PERSISTING)
        usage: TokenUsage | None = result.usage
        with _timed(result.timings, "persist"):
            try:
                entry = await self._ledger.append(record, usage)
            except PersistenceError as exc:
                logger.warning("Classification for %s was not saved: %s", asset.ref, exc)
                result.persistence_error = str(exc)
                result.status = PipelineState.DEGRADED
                return
        result.history_entry_id = entry.id

    def _degrade(self, asset: MediaAsset, result: PipelineResult, error: str) -> None:
        logger.warning("Classification failed for %s: %s", asset.ref, error)
        result.classification = None
        result.classification_error = error
        result.status = PipelineState.DEGRADED

    @staticmethod
    def _transition(asset: MediaAsset, state: PipelineState, detail: str = "") -> None:
        level = logging.ERROR if state is PipelineState.FAILED else logging.INFO
        suffix = f" {detail}" if detail else ""
        logger.log(level, "Pipeline %s for %s%s", state.value, asset.ref, suffix)

    @contextlib.asynccontextmanager
    async def _asset_lease(self, asset: MediaAsset) -> AsyncIterator[None]:
        """Hold the pending-deletion obligation for an ephemeral asset."""
        try:
            yield
        finally:
            if not asset.retain:
                try:
                    await asyncio.to_thread(self._media.delete, asset.ref)
                except CleanupError as exc:
                    logger.warning("Cleanup of %s failed: %s", asset.ref, exc)
                except Exception:
                    logger.exception("Unexpected error while cleaning up %s", asset.ref)
                else:
                    logger.info("Deleted ephemeral media asset %s", asset.ref)
