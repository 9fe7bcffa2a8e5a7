"""
Report store - the persistence collaborator behind the report service.

Documents are plain dicts using these fields:
    title, description, issue_type, status, latitude, longitude, image_url,
    assigned_to, assigned_officer, eta, reported_by, boosts, updates,
    timestamp, last_updated

Implementations MUST perform atomic_increment and atomic_append as single
document-level operations (no client-side read-modify-write), otherwise
concurrent boosts and status changes lose updates.
"""

import asyncio
import copy
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as gcp_exceptions

from app.core.errors import NotFoundError, StoreError
from app.services.query_planner import DESCENDING, QueryPlan
from app.utils.firestore_helpers import order_direction, to_datetime, where_filter

logger = logging.getLogger(__name__)


class ReportStore(ABC):
    """Abstract document store for reports."""

    @abstractmethod
    async def create(self, data: Dict) -> str:
        """Store a new report and return its generated id. Sets "timestamp"."""

    @abstractmethod
    async def get(self, report_id: str) -> Optional[Dict]:
        """Return the report (with "id") or None if it does not exist."""

    @abstractmethod
    async def query(self, plan: QueryPlan) -> List[Dict]:
        """Run a planned query: equality filters, ordering, limit."""

    @abstractmethod
    def stream(self, filters: Tuple[Tuple[str, Any], ...] = ()) -> AsyncIterator[Dict]:
        """Iterate over every report matching the equality filters."""

    @abstractmethod
    async def atomic_increment(self, report_id: str, field: str, delta: int = 1) -> None:
        """Atomically add delta to a numeric field. Raises NotFoundError."""

    @abstractmethod
    async def atomic_append(
        self,
        report_id: str,
        field: str,
        value: Dict,
        fields: Optional[Dict] = None
    ) -> None:
        """
        Atomically append value to an array field, setting `fields` and
        "last_updated" in the same write. Raises NotFoundError.
        """

    @abstractmethod
    async def delete(self, report_id: str) -> None:
        """Permanently remove a report. Raises NotFoundError."""

    @abstractmethod
    async def ping(self) -> Dict:
        """Lightweight connectivity check."""


class FirestoreReportStore(ReportStore):
    """
    Report store on Cloud Firestore (async client).

    Coordinates are kept in a GeoPoint "location" field; boosts and the
    update log use the server-side Increment and ArrayUnion transforms.
    """

    def __init__(self, db, collection: str = "reports"):
        self.db = db
        self.collection_name = collection
        self.collection = db.collection(collection)

    @staticmethod
    def _to_document(data: Dict) -> Dict:
        document = dict(data)
        latitude = document.pop("latitude", None)
        longitude = document.pop("longitude", None)
        if latitude is not None and longitude is not None:
            document["location"] = firestore.GeoPoint(latitude, longitude)
        return document

    @staticmethod
    def _from_snapshot(snapshot) -> Dict:
        data = snapshot.to_dict() or {}
        location = data.pop("location", None)
        data["id"] = snapshot.id
        data["latitude"] = getattr(location, "latitude", None)
        data["longitude"] = getattr(location, "longitude", None)
        data["timestamp"] = to_datetime(data.get("timestamp"))
        data["last_updated"] = to_datetime(data.get("last_updated"))
        data["boosts"] = data.get("boosts") or 0
        data["updates"] = data.get("updates") or []
        return data

    def _build_query(self, filters, order_by=(), limit=None):
        query = self.collection
        for field, value in filters:
            query = where_filter(query, field, "==", value)
        for field, direction in order_by:
            query = query.order_by(field, direction=order_direction(direction))
        if limit is not None:
            query = query.limit(limit)
        return query

    async def create(self, data: Dict) -> str:
        doc_ref = self.collection.document()  # Auto-generate unique ID
        document = self._to_document(data)
        document["timestamp"] = firestore.SERVER_TIMESTAMP
        try:
            await doc_ref.set(document)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to create report: {e}") from e
        return doc_ref.id

    async def get(self, report_id: str) -> Optional[Dict]:
        try:
            snapshot = await self.collection.document(report_id).get()
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to read report {report_id}: {e}") from e
        if not snapshot.exists:
            return None
        return self._from_snapshot(snapshot)

    async def query(self, plan: QueryPlan) -> List[Dict]:
        query = self._build_query(plan.filters, plan.order_by, plan.limit)
        try:
            return [self._from_snapshot(snapshot) async for snapshot in query.stream()]
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Report query failed: {e}") from e

    async def stream(self, filters: Tuple[Tuple[str, Any], ...] = ()) -> AsyncIterator[Dict]:
        query = self._build_query(filters)
        try:
            async for snapshot in query.stream():
                yield self._from_snapshot(snapshot)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Report scan failed: {e}") from e

    async def _update(self, report_id: str, changes: Dict) -> None:
        # update() fails with NotFound on a missing document, so no
        # existence read is needed before the write
        try:
            await self.collection.document(report_id).update(changes)
        except gcp_exceptions.NotFound as e:
            raise NotFoundError() from e
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to update report {report_id}: {e}") from e

    async def atomic_increment(self, report_id: str, field: str, delta: int = 1) -> None:
        await self._update(report_id, {field: firestore.Increment(delta)})

    async def atomic_append(
        self,
        report_id: str,
        field: str,
        value: Dict,
        fields: Optional[Dict] = None
    ) -> None:
        changes = dict(fields or {})
        changes["last_updated"] = firestore.SERVER_TIMESTAMP
        changes[field] = firestore.ArrayUnion([value])
        await self._update(report_id, changes)

    async def delete(self, report_id: str) -> None:
        doc_ref = self.collection.document(report_id)
        try:
            snapshot = await doc_ref.get()
            if not snapshot.exists:
                raise NotFoundError()
            await doc_ref.delete()
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to delete report {report_id}: {e}") from e

    async def ping(self) -> Dict:
        try:
            async for _ in self.collection.limit(1).stream():
                break
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Firestore ping failed: {e}") from e
        return {"database": "firestore", "collection": self.collection_name}


class InMemoryReportStore(ReportStore):
    """
    Process-local report store for USE_MOCK_DB mode and tests.

    Mutations run under one asyncio.Lock, which gives the same
    no-lost-update guarantee as Firestore's server-side transforms.
    """

    def __init__(self):
        self._documents: Dict[str, Dict] = {}
        self._lock = asyncio.Lock()
        self._last_timestamp: Optional[datetime] = None

    def _now(self) -> datetime:
        # Strictly increasing so "newest first" ordering is deterministic
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    @staticmethod
    def _matches(document: Dict, filters) -> bool:
        return all(document.get(field) == value for field, value in filters)

    def _snapshot(self, report_id: str) -> Dict:
        document = copy.deepcopy(self._documents[report_id])
        document["id"] = report_id
        return document

    async def create(self, data: Dict) -> str:
        report_id = uuid.uuid4().hex[:20]
        async with self._lock:
            document = copy.deepcopy(data)
            document["timestamp"] = self._now()
            self._documents[report_id] = document
        return report_id

    async def get(self, report_id: str) -> Optional[Dict]:
        if report_id not in self._documents:
            return None
        return self._snapshot(report_id)

    async def query(self, plan: QueryPlan) -> List[Dict]:
        results = [
            self._snapshot(report_id)
            for report_id, document in self._documents.items()
            if self._matches(document, plan.filters)
        ]
        # Stable sorts applied from the least significant key up
        for field, direction in reversed(plan.order_by):
            results.sort(key=lambda d: d.get(field) or 0, reverse=direction == DESCENDING)
        if plan.limit is not None:
            results = results[:plan.limit]
        return results

    async def stream(self, filters: Tuple[Tuple[str, Any], ...] = ()) -> AsyncIterator[Dict]:
        matching = [
            report_id for report_id, document in self._documents.items()
            if self._matches(document, filters)
        ]
        for report_id in matching:
            if report_id in self._documents:
                yield self._snapshot(report_id)

    async def atomic_increment(self, report_id: str, field: str, delta: int = 1) -> None:
        async with self._lock:
            document = self._documents.get(report_id)
            if document is None:
                raise NotFoundError()
            document[field] = (document.get(field) or 0) + delta

    async def atomic_append(
        self,
        report_id: str,
        field: str,
        value: Dict,
        fields: Optional[Dict] = None
    ) -> None:
        async with self._lock:
            document = self._documents.get(report_id)
            if document is None:
                raise NotFoundError()
            document.update(copy.deepcopy(fields or {}))
            document["last_updated"] = self._now()
            document.setdefault(field, []).append(copy.deepcopy(value))

    async def delete(self, report_id: str) -> None:
        async with self._lock:
            if self._documents.pop(report_id, None) is None:
                raise NotFoundError()

    async def ping(self) -> Dict:
        return {"database": "in-memory", "documents": len(self._documents)}
