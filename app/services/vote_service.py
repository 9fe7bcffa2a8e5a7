"""
Vote Service - "boost" counter on reports.

KNOWN LIMITATION:
Repeat boosts from the same user are NOT deduplicated. The user_id is
accepted and logged only.
"""

from typing import Optional
import logging

from app.services.report_store import ReportStore

logger = logging.getLogger(__name__)

BOOSTS_FIELD = "boosts"


class BoostCounter:
    """Non-negative, monotonically increasing boost count per report."""

    def __init__(self, store: ReportStore):
        self.store = store

    async def boost(self, report_id: str, user_id: Optional[str] = None) -> None:
        """
        Add one boost to a report with a single atomic increment.

        Raises:
            NotFoundError: If the report does not exist
            StoreError: If the store call fails
        """
        await self.store.atomic_increment(report_id, BOOSTS_FIELD, 1)
        logger.info(f"Report {report_id} boosted by {user_id or 'anonymous'}")
