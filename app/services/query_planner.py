"""
Query planning for report listings.

CAPABILITY LIMIT:
General listings apply at most ONE equality predicate so that the backing
store never needs a multi-field index. When several filters are supplied
the first one in precedence order (status > ward > issue_type) wins and the
rest are ignored. Unfiltered listings are ordered newest first instead.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

ASCENDING = "asc"
DESCENDING = "desc"


@dataclass(frozen=True)
class QueryPlan:
    """Store-agnostic description of a report query."""
    filters: Tuple[Tuple[str, Any], ...] = ()
    order_by: Tuple[Tuple[str, str], ...] = ()
    limit: Optional[int] = None


class QueryPlanner:
    """Turns listing parameters into a QueryPlan."""

    # (request parameter, document field), highest precedence first
    FILTER_PRECEDENCE = (
        ("status", "status"),
        ("ward", "assigned_to"),
        ("issue_type", "issue_type"),
    )

    def __init__(self, default_limit: int = 50, default_ward_limit: int = 100):
        self.default_limit = default_limit
        self.default_ward_limit = default_ward_limit

    @staticmethod
    def parse_limit(value: Any, default: int) -> int:
        """Parse a limit query parameter; must be an integer >= 1."""
        if value is None or value == "":
            return default
        try:
            limit = int(value)
        except (TypeError, ValueError):
            raise ValidationError("limit must be a positive integer")
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        return limit

    def plan_listing(
        self,
        status: Optional[str] = None,
        ward: Optional[str] = None,
        issue_type: Optional[str] = None,
        limit: Any = None
    ) -> QueryPlan:
        params = {"status": status, "ward": ward, "issue_type": issue_type}
        supplied = [(name, field) for name, field in self.FILTER_PRECEDENCE if params[name]]
        parsed_limit = self.parse_limit(limit, self.default_limit)

        if not supplied:
            return QueryPlan(order_by=(("timestamp", DESCENDING),), limit=parsed_limit)

        name, field = supplied[0]
        if len(supplied) > 1:
            ignored = ", ".join(n for n, _ in supplied[1:])
            logger.debug(f"Listing filtered by '{name}' only; ignoring: {ignored}")

        return QueryPlan(filters=((field, params[name]),), limit=parsed_limit)

    def plan_ward_listing(
        self,
        ward: str,
        status: Optional[str] = None,
        limit: Any = None
    ) -> QueryPlan:
        """
        Ward dashboard listing: most boosted first, then newest.
        Needs a composite (assigned_to, status, boosts, timestamp) index on Firestore.
        """
        filters = [("assigned_to", ward)]
        if status:
            filters.append(("status", status))
        return QueryPlan(
            filters=tuple(filters),
            order_by=(("boosts", DESCENDING), ("timestamp", DESCENDING)),
            limit=self.parse_limit(limit, self.default_ward_limit),
        )

    def plan_analytics(self, ward: Optional[str] = None) -> QueryPlan:
        """Full scan, optionally restricted to one ward."""
        if ward:
            return QueryPlan(filters=(("assigned_to", ward),))
        return QueryPlan()
