"""
Analytics Service - grouped counts and boost averages over a report set.
"""

from collections import defaultdict
from typing import AsyncIterable, Dict
import logging

logger = logging.getLogger(__name__)


class AnalyticsAggregator:
    """
    Single-pass accumulator over report documents.

    Feed documents with add() and read the result with summary(), or use
    aggregate() on an async stream from the report store.
    """

    def __init__(self):
        self.total_reports = 0
        self.total_boosts = 0
        self.by_status = defaultdict(int)
        self.by_type = defaultdict(int)
        self.by_ward = defaultdict(int)

    def add(self, report: Dict) -> None:
        self.total_reports += 1
        self.by_status[report.get("status") or "Unknown"] += 1
        self.by_type[report.get("issue_type") or "Unknown"] += 1
        self.by_ward[report.get("assigned_to") or "Unassigned"] += 1
        self.total_boosts += report.get("boosts") or 0

    def summary(self) -> Dict:
        avg_boosts = 0
        if self.total_reports > 0:
            avg_boosts = round(self.total_boosts / self.total_reports, 2)

        return {
            "total_reports": self.total_reports,
            "by_status": dict(self.by_status),
            "by_type": dict(self.by_type),
            "by_ward": dict(self.by_ward),
            "total_boosts": self.total_boosts,
            "avg_boosts": avg_boosts,
        }

    @classmethod
    async def aggregate(cls, reports: AsyncIterable[Dict]) -> Dict:
        aggregator = cls()
        async for report in reports:
            aggregator.add(report)
        logger.debug(f"Aggregated {aggregator.total_reports} reports")
        return aggregator.summary()
