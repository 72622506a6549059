"""Process endpoint: run the full pipeline for a stored media asset."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse, ProcessRequest, ProcessResponse
from src.errors import IngestionError, TranscriptionError
from src.ingestion.models import MediaAsset
from src.pipeline.orchestrator import PipelineOrchestrator
from src.services import get_orchestrator

router = APIRouter()


@router.post(
    "/api/process",
    response_model=ProcessResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def process_media(
    request: ProcessRequest,
    orchestrator: Annotated[PipelineOrchestrator, Depends(get_orchestrator)],
) -> ProcessResponse | JSONResponse:
    """Transcribe, classify and record a media asset already in storage.

    Classification and persistence failures do not fail the request: the
    transcript is returned with the error attached. Only an unreachable
    asset (400) or a failed transcription (502) produce an ``{"error"}`` body.
    """
    asset = MediaAsset(ref=request.media_ref, retain=request.retain)
    try:
        result = await orchestrator.process(asset)
    except IngestionError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except TranscriptionError as exc:
        return JSONResponse(status_code=502, content={"error": str(exc)})

    return ProcessResponse.from_result(result)
