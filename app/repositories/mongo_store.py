# ===================================
# app/repositories/mongo_store.py
# ===================================
"""
Implémentation MongoDB (pymongo) de DocumentStore.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.repositories.document_store import DuplicateRecordError, Record, SortSpec, check_filter

logger = logging.getLogger(__name__)

# Index créés au démarrage, par collection
INDEXES = {
    "users": [
        ([("email", ASCENDING)], {"unique": True}),
    ],
    "promotions": [
        ([("productName", ASCENDING)], {}),
        ([("status", ASCENDING)], {}),
        ([("submittedBy", ASCENDING)], {}),
        ([("startDate", ASCENDING), ("endDate", ASCENDING)], {}),
    ],
}


def _object_id(record_id: Any) -> Optional[ObjectId]:
    """Convertir un id en ObjectId, None si mal formé"""
    if isinstance(record_id, ObjectId):
        return record_id
    try:
        return ObjectId(str(record_id))
    except (InvalidId, TypeError):
        return None


def _now() -> datetime:
    # MongoDB stocke les dates à la milliseconde
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def _to_record(document: Optional[Mapping[str, Any]]) -> Optional[Record]:
    if document is None:
        return None
    record = {k: v for k, v in document.items() if k != "_id"}
    record["id"] = str(document["_id"])
    return record


def _to_query(filter: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    check_filter(filter)
    query: Dict[str, Any] = {}
    for field, value in (filter or {}).items():
        if field != "id":
            query[field] = value
        elif isinstance(value, Mapping) and "$in" in value:
            ids = [_object_id(v) for v in value["$in"]]
            query["_id"] = {"$in": [oid for oid in ids if oid is not None]}
        else:
            query["_id"] = _object_id(value)
    return query


class MongoDocumentStore:
    """Passerelle MongoDB : une base, une collection par entité"""

    def __init__(self, uri: str = "mongodb://localhost:27017/myapp",
                 timeout_ms: int = 5000, client: Optional[MongoClient] = None,
                 database: Optional[str] = None):
        self.client = client or MongoClient(
            uri,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
            tz_aware=True,
        )
        if database:
            self.db = self.client[database]
        else:
            self.db = self.client.get_default_database(default="myapp")

    def ensure_indexes(self) -> None:
        """Créer les index des collections (idempotent)"""
        for collection, indexes in INDEXES.items():
            for keys, options in indexes:
                self.db[collection].create_index(keys, **options)
        logger.info("Index MongoDB vérifiés")

    def find(self, collection: str, filter: Optional[Mapping[str, Any]] = None,
             sort: Optional[SortSpec] = None, skip: int = 0, limit: int = 0,
             projection: Optional[Sequence[str]] = None) -> List[Record]:
        fields = {field: 1 for field in projection} if projection is not None else None
        cursor = self.db[collection].find(_to_query(filter), fields)
        if sort:
            cursor = cursor.sort([("_id" if f == "id" else f, d) for f, d in sort])
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [_to_record(document) for document in cursor]

    def count(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> int:
        return self.db[collection].count_documents(_to_query(filter))

    def find_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        oid = _object_id(record_id)
        if oid is None:
            return None
        return _to_record(self.db[collection].find_one({"_id": oid}))

    def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        now = _now()
        document = {k: v for k, v in record.items() if k != "id"}
        document.update({"createdAt": now, "updatedAt": now})
        try:
            result = self.db[collection].insert_one(document)
        except DuplicateKeyError as e:
            raise DuplicateRecordError(collection, str(e)) from e
        document["_id"] = result.inserted_id
        return _to_record(document)

    def update_by_id(self, collection: str, record_id: str,
                     changes: Mapping[str, Any]) -> Optional[Record]:
        oid = _object_id(record_id)
        if oid is None:
            return None
        updates = {k: v for k, v in changes.items() if k not in ("id", "createdAt")}
        updates["updatedAt"] = _now()
        try:
            document = self.db[collection].find_one_and_update(
                {"_id": oid},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise DuplicateRecordError(collection, str(e)) from e
        return _to_record(document)

    def delete_by_id(self, collection: str, record_id: str) -> bool:
        oid = _object_id(record_id)
        if oid is None:
            return False
        return self.db[collection].delete_one({"_id": oid}).deleted_count == 1

    def ping(self) -> bool:
        self.client.admin.command("ping")
        return True

    def close(self) -> None:
        self.client.close()
