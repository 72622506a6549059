"""Read-only access to the history ledger for analytics consumers."""

from __future__ import annotations

import logging

from src.classification.models import HistoryEntry
from src.errors import PersistenceError
from src.history.ledger import HistoryLedger

logger = logging.getLogger(__name__)


class AnalyticsReader:
    """Hand the full ledger to downstream aggregation.

    A failing fetch degrades to "no data" instead of propagating.
    """

    def __init__(self, ledger: HistoryLedger) -> None:
        self._ledger = ledger

    async def get_history(self) -> list[HistoryEntry]:
        try:
            return await self._ledger.read_all()
        except PersistenceError as exc:
            logger.warning("History unavailable, returning no data: %s", exc)
            return []
