"""Transcribe endpoint: direct upload of a small audio file, transcription only."""

from __future__ import annotations

import asyncio
import time
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, SegmentResponse, TranscribeResponse
from src.config import settings
from src.errors import TranscriptionError
from src.ingestion.transcription import TranscriptionClient
from src.services import get_transcription_client

router = APIRouter()


@router.post(
    "/api/transcribe",
    response_model=TranscribeResponse,
    responses={502: {"model": ErrorResponse}},
)
async def transcribe_upload(
    file: Annotated[UploadFile, File(...)],
    transcriber: Annotated[TranscriptionClient, Depends(get_transcription_client)],
) -> TranscribeResponse | JSONResponse:
    """Transcribe an uploaded audio file without classifying or storing it.

    The upload is held in memory only; nothing is written to storage.
    """
    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        max_mb = settings.max_upload_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {max_mb} MB.",
        )
    if not raw:
        raise HTTPException(status_code=400, detail="Uploaded audio file is empty")

    started = time.perf_counter()
    try:
        # Run the synchronous SDK call in a thread to keep the event loop free.
        transcript = await asyncio.to_thread(
            transcriber.transcribe, raw, file.filename or "audio"
        )
    except TranscriptionError as exc:
        return JSONResponse(status_code=502, content={"error": str(exc)})
    elapsed = time.perf_counter() - started

    return TranscribeResponse(
        text=transcript.text,
        segments=[
            SegmentResponse(start=s.start, end=s.end, text=s.text) for s in transcript.segments
        ],
        whisper_time_seconds=round(elapsed, 2),
    )
