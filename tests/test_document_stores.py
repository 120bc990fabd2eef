"""
DocumentStore implementations: in-memory and MongoDB (through mongomock).
"""

from datetime import datetime, timezone

import mongomock
import pytest

from app.repositories.document_store import ASCENDING, DESCENDING
from app.repositories.memory_store import InMemoryDocumentStore
from app.repositories.mongo_store import MongoDocumentStore

pytestmark = pytest.mark.unit


def _memory_store():
    return InMemoryDocumentStore()


def _mongo_store():
    client = mongomock.MongoClient()
    return MongoDocumentStore(client=client, database="promotions_test")


@pytest.fixture(params=[_memory_store, _mongo_store], ids=["memory", "mongo"])
def store(request):
    return request.param()


def _seed(store):
    for name, price, status in [("A", 5, "approved"), ("B", 1, "pending"), ("C", 3, "approved")]:
        store.insert("promotions", {"productName": name, "price": price, "status": status})


def test_insert_assigns_id_and_timestamps(store):
    record = store.insert("promotions", {"productName": "Widget"})

    assert isinstance(record["id"], str)
    assert "_id" not in record
    assert record["createdAt"] is not None
    assert record["createdAt"] == record["updatedAt"]
    assert store.find_by_id("promotions", record["id"])["productName"] == "Widget"


def test_find_filters_sorts_and_pages(store):
    _seed(store)

    approved = store.find("promotions", {"status": "approved"}, sort=[("price", ASCENDING)])
    assert [r["productName"] for r in approved] == ["C", "A"]

    by_price = store.find("promotions", sort=[("price", DESCENDING)], skip=1, limit=1)
    assert [r["productName"] for r in by_price] == ["C"]

    assert store.count("promotions") == 3
    assert store.count("promotions", {"status": "approved"}) == 2


def test_range_and_in_operators(store):
    _seed(store)
    ids = [r["id"] for r in store.find("promotions", {"productName": {"$in": ["A", "B"]}})]

    assert len(ids) == 2
    assert store.count("promotions", {"price": {"$gte": 3, "$lte": 5}}) == 2
    assert store.count("promotions", {"id": {"$in": ids}}) == 2


@pytest.mark.parametrize("operator", ["$regex", "$ne"])
def test_unsupported_operator_is_rejected(store, operator):
    _seed(store)

    with pytest.raises(ValueError, match="Unsupported filter operator"):
        store.find("promotions", {"productName": {operator: "A"}})
    with pytest.raises(ValueError):
        store.count("empty", {"productName": {operator: "A"}})


def test_projection_keeps_id(store):
    _seed(store)

    records = store.find("promotions", projection=["price"])

    assert all(set(r) == {"id", "price"} for r in records)


def test_update_by_id_is_partial(store):
    record = store.insert("promotions", {"productName": "Widget", "price": 10})

    updated = store.update_by_id("promotions", record["id"], {"price": 12})

    assert updated["price"] == 12
    assert updated["productName"] == "Widget"
    assert "createdAt" in updated


def test_update_and_delete_missing_ids(store):
    assert store.update_by_id("promotions", "65a000000000000000000099", {"price": 1}) is None
    assert store.delete_by_id("promotions", "65a000000000000000000099") is False


@pytest.mark.parametrize("bad_id", ["not-an-id", "123", ""])
def test_malformed_ids_behave_as_missing(store, bad_id):
    assert store.find_by_id("promotions", bad_id) is None
    assert store.update_by_id("promotions", bad_id, {"price": 1}) is None
    assert store.delete_by_id("promotions", bad_id) is False


def test_delete_by_id(store):
    record = store.insert("users", {"email": "a@b.co"})

    assert store.delete_by_id("users", record["id"]) is True
    assert store.find_by_id("users", record["id"]) is None


def test_returned_records_are_copies():
    store = InMemoryDocumentStore()
    record = store.insert("promotions", {"tags": ["x"]})

    record["tags"].append("y")

    assert store.find_by_id("promotions", record["id"])["tags"] == ["x"]


def test_memory_store_uses_injected_clock():
    instant = datetime(2024, 1, 1, tzinfo=timezone.utc)
    store = InMemoryDocumentStore(clock=lambda: instant)

    assert store.insert("users", {"email": "a@b.co"})["createdAt"] == instant
