"""
Firestore query helpers.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply a single field filter using the keyword FieldFilter API.

    Usage:
        query = where_filter(collection, "status", "==", "Open")
    """
    return query.where(filter=FieldFilter(field_path, op_string, value))


def order_direction(direction: str) -> str:
    """Map a QueryPlan direction ("asc"/"desc") to Firestore's constant."""
    if direction == "desc":
        return firestore.Query.DESCENDING
    return firestore.Query.ASCENDING


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Normalise a Firestore timestamp value to a timezone-aware datetime.

    Firestore returns DatetimeWithNanoseconds (a datetime subclass); older
    documents may hold ISO strings.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str):
        try:
            return to_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    return None
