"""History endpoint: expose the classification ledger to analytics clients."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from src.classification.models import HistoryEntry
from src.history.analytics import AnalyticsReader
from src.services import get_analytics_reader

router = APIRouter()


@router.get("/api/history", response_model=list[HistoryEntry], response_model_exclude_none=True)
async def get_history(
    reader: Annotated[AnalyticsReader, Depends(get_analytics_reader)],
) -> list[HistoryEntry]:
    """Return every ledger entry in append order (empty when unavailable)."""
    return await reader.get_history()
