"""
Tests for the report store implementations.

The Firestore store is exercised against mocked async document references;
no real project is contacted.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as gcp_exceptions

from app.core.errors import NotFoundError, StoreError
from app.services.query_planner import DESCENDING, QueryPlan
from app.services.report_store import FirestoreReportStore, InMemoryReportStore


async def _aiter(items):
    for item in items:
        yield item


def _collect(async_iterable):
    async def run():
        return [item async for item in async_iterable]
    return asyncio.run(run())


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------
class TestInMemoryReportStore:

    def test_create_and_get(self, store):
        report_id = asyncio.run(store.create({"title": "Leak", "boosts": 0, "updates": []}))
        report = asyncio.run(store.get(report_id))

        assert report["id"] == report_id
        assert report["title"] == "Leak"
        assert isinstance(report["timestamp"], datetime)

    def test_get_missing_returns_none(self, store):
        assert asyncio.run(store.get("missing")) is None

    def test_returned_documents_are_copies(self, store):
        report_id = asyncio.run(store.create({"title": "Leak", "updates": []}))
        report = asyncio.run(store.get(report_id))
        report["updates"].append({"type": "tampered"})

        assert asyncio.run(store.get(report_id))["updates"] == []

    def test_query_filters_orders_and_limits(self, store):
        async def seed():
            await store.create({"assigned_to": "A", "boosts": 1})
            await store.create({"assigned_to": "A", "boosts": 5})
            await store.create({"assigned_to": "B", "boosts": 9})
            await store.create({"assigned_to": "A", "boosts": 1})
        asyncio.run(seed())

        plan = QueryPlan(
            filters=(("assigned_to", "A"),),
            order_by=(("boosts", DESCENDING), ("timestamp", DESCENDING)),
            limit=2,
        )
        results = asyncio.run(store.query(plan))

        assert [r["boosts"] for r in results] == [5, 1]
        assert all(r["assigned_to"] == "A" for r in results)

    def test_query_newest_first(self, store):
        async def seed():
            return [await store.create({"title": str(i)}) for i in range(3)]
        ids = asyncio.run(seed())

        results = asyncio.run(store.query(QueryPlan(order_by=(("timestamp", DESCENDING),))))
        assert [r["id"] for r in results] == list(reversed(ids))

    def test_stream_with_filter(self, store):
        async def seed():
            await store.create({"assigned_to": "A"})
            await store.create({"assigned_to": "B"})
        asyncio.run(seed())

        assert len(_collect(store.stream())) == 2
        assert [r["assigned_to"] for r in _collect(store.stream((("assigned_to", "B"),)))] == ["B"]

    def test_atomic_append_sets_fields_in_same_write(self, store):
        report_id = asyncio.run(store.create({"status": "Open", "updates": [{"type": "reported"}]}))

        asyncio.run(store.atomic_append(report_id, "updates", {"type": "resolved"}, fields={"status": "Resolved"}))
        report = asyncio.run(store.get(report_id))

        assert report["status"] == "Resolved"
        assert [u["type"] for u in report["updates"]] == ["reported", "resolved"]
        assert report["last_updated"] is not None

    def test_mutations_on_missing_report(self, store):
        with pytest.raises(NotFoundError):
            asyncio.run(store.atomic_increment("missing", "boosts"))
        with pytest.raises(NotFoundError):
            asyncio.run(store.atomic_append("missing", "updates", {}))
        with pytest.raises(NotFoundError):
            asyncio.run(store.delete("missing"))

    def test_delete(self, store):
        report_id = asyncio.run(store.create({"title": "x"}))
        asyncio.run(store.delete(report_id))
        assert asyncio.run(store.get(report_id)) is None


# ---------------------------------------------------------------------------
# Firestore store
# ---------------------------------------------------------------------------
@pytest.fixture
def firestore_parts():
    db = MagicMock()
    collection = MagicMock()
    doc_ref = MagicMock()
    doc_ref.id = "doc-1"
    doc_ref.set = AsyncMock()
    doc_ref.update = AsyncMock()
    doc_ref.delete = AsyncMock()
    doc_ref.get = AsyncMock()
    db.collection.return_value = collection
    collection.document.return_value = doc_ref
    return FirestoreReportStore(db, "reports"), collection, doc_ref


def _snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data
    return snapshot


class TestFirestoreReportStore:

    def test_create_stores_geopoint_and_server_timestamp(self, firestore_parts):
        store, collection, doc_ref = firestore_parts

        report_id = asyncio.run(store.create({"title": "Leak", "latitude": 13.08, "longitude": 80.27}))

        assert report_id == "doc-1"
        document = doc_ref.set.call_args[0][0]
        assert "latitude" not in document and "longitude" not in document
        assert document["location"] == firestore.GeoPoint(13.08, 80.27)
        assert document["timestamp"] is firestore.SERVER_TIMESTAMP

    def test_get_converts_location(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        created = datetime(2024, 5, 1, tzinfo=timezone.utc)
        doc_ref.get.return_value = _snapshot("doc-1", {
            "title": "Leak",
            "location": firestore.GeoPoint(13.08, 80.27),
            "timestamp": created,
        })

        report = asyncio.run(store.get("doc-1"))

        assert report["id"] == "doc-1"
        assert (report["latitude"], report["longitude"]) == (13.08, 80.27)
        assert report["timestamp"] == created
        assert report["boosts"] == 0
        assert report["updates"] == []

    def test_get_missing(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        doc_ref.get.return_value = _snapshot("doc-1", None, exists=False)
        assert asyncio.run(store.get("doc-1")) is None

    def test_atomic_increment_uses_server_transform(self, firestore_parts):
        store, _, doc_ref = firestore_parts

        asyncio.run(store.atomic_increment("doc-1", "boosts", 1))

        changes = doc_ref.update.call_args[0][0]
        assert isinstance(changes["boosts"], firestore.Increment)
        assert changes["boosts"].value == 1
        doc_ref.get.assert_not_called()

    def test_atomic_append_single_update(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        entry = {"type": "resolved", "message": "Status changed to Resolved"}

        asyncio.run(store.atomic_append("doc-1", "updates", entry, fields={"status": "Resolved"}))

        assert doc_ref.update.await_count == 1
        changes = doc_ref.update.call_args[0][0]
        assert changes["status"] == "Resolved"
        assert changes["last_updated"] is firestore.SERVER_TIMESTAMP
        assert isinstance(changes["updates"], firestore.ArrayUnion)
        assert changes["updates"].values == [entry]

    def test_update_on_missing_document_is_not_found(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        doc_ref.update.side_effect = gcp_exceptions.NotFound("no document")

        with pytest.raises(NotFoundError):
            asyncio.run(store.atomic_increment("doc-1", "boosts"))

    def test_backend_failure_is_store_error(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        doc_ref.update.side_effect = gcp_exceptions.ServiceUnavailable("down")

        with pytest.raises(StoreError):
            asyncio.run(store.atomic_append("doc-1", "updates", {}))

    def test_query_applies_plan(self, firestore_parts):
        store, collection, _ = firestore_parts
        filtered = MagicMock()
        limited = MagicMock()
        collection.where.return_value = filtered
        filtered.limit.return_value = limited
        limited.stream.return_value = _aiter([
            _snapshot("a", {"status": "Open", "location": firestore.GeoPoint(13.0, 80.2), "boosts": 2}),
        ])

        results = asyncio.run(store.query(QueryPlan(filters=(("status", "Open"),), limit=5)))

        field_filter = collection.where.call_args.kwargs["filter"]
        assert (field_filter.field_path, field_filter.op_string, field_filter.value) == ("status", "==", "Open")
        filtered.limit.assert_called_once_with(5)
        assert results[0]["id"] == "a"
        assert results[0]["boosts"] == 2

    def test_query_ordering(self, firestore_parts):
        store, collection, _ = firestore_parts
        ordered = MagicMock()
        limited = MagicMock()
        collection.order_by.return_value = ordered
        ordered.limit.return_value = limited
        limited.stream.return_value = _aiter([])

        asyncio.run(store.query(QueryPlan(order_by=(("timestamp", DESCENDING),), limit=50)))

        collection.order_by.assert_called_once_with("timestamp", direction=firestore.Query.DESCENDING)

    def test_delete_missing(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        doc_ref.get.return_value = _snapshot("doc-1", None, exists=False)

        with pytest.raises(NotFoundError):
            asyncio.run(store.delete("doc-1"))
        doc_ref.delete.assert_not_called()

    def test_delete_existing(self, firestore_parts):
        store, _, doc_ref = firestore_parts
        doc_ref.get.return_value = _snapshot("doc-1", {"title": "x"})

        asyncio.run(store.delete("doc-1"))
        doc_ref.delete.assert_awaited_once()


# ---------------------------------------------------------------------------
# Store selection
# ---------------------------------------------------------------------------
def test_create_report_store_selects_backend(monkeypatch):
    from app.config import firebase

    fake_db = MagicMock()
    monkeypatch.setattr(firebase, "get_db", lambda: fake_db)

    assert isinstance(firebase.create_report_store(use_mock=True), InMemoryReportStore)
    firestore_store = firebase.create_report_store(use_mock=False)
    assert isinstance(firestore_store, FirestoreReportStore)
    fake_db.collection.assert_called_once_with(firebase.settings.REPORTS_COLLECTION)
