# ===================================
# app/repositories/memory_store.py
# ===================================
"""
Document store en mémoire.

Utilisé pour le développement local (STORE_BACKEND=memory) et pour les
tests. Applique les mêmes conventions que MongoDocumentStore : ids
ObjectId sous forme de chaîne, timestamps, filtres d'égalité et
opérateurs $gte / $lte / $in.
"""

from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from bson import ObjectId

from app.repositories.document_store import ASCENDING, Record, SortSpec, check_filter


def _matches(record: Mapping[str, Any], filter: Optional[Mapping[str, Any]]) -> bool:
    for field, expected in (filter or {}).items():
        value = record.get(field)
        if isinstance(expected, Mapping):
            for operator, operand in expected.items():
                if operator == "$gte":
                    if value is None or not value >= operand:
                        return False
                elif operator == "$lte":
                    if value is None or not value <= operand:
                        return False
                elif operator == "$in":
                    if value not in operand:
                        return False
        elif value != expected:
            return False
    return True


def _sorted(records: List[Record], sort: Optional[SortSpec]) -> List[Record]:
    # Tris stables successifs, de la clé la moins prioritaire à la plus prioritaire
    for field, direction in reversed(list(sort or [])):
        present = [r for r in records if r.get(field) is not None]
        missing = [r for r in records if r.get(field) is None]
        present.sort(key=lambda r: r[field], reverse=direction != ASCENDING)
        # Comme MongoDB : les valeurs nulles d'abord en tri croissant
        records = missing + present if direction == ASCENDING else present + missing
    return records


class InMemoryDocumentStore:
    """Implémentation de DocumentStore sur des dictionnaires"""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _collection(self, name: str) -> Dict[str, Record]:
        return self._collections.setdefault(name, {})

    def find(self, collection: str, filter: Optional[Mapping[str, Any]] = None,
             sort: Optional[SortSpec] = None, skip: int = 0, limit: int = 0,
             projection: Optional[Sequence[str]] = None) -> List[Record]:
        check_filter(filter)
        with self._lock:
            records = [r for r in self._collection(collection).values() if _matches(r, filter)]
            records = _sorted(records, sort)
            records = records[max(skip, 0):]
            if limit:
                records = records[:limit]
            if projection is not None:
                fields = set(projection) | {"id"}
                records = [{k: v for k, v in r.items() if k in fields} for r in records]
            return copy.deepcopy(records)

    def count(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> int:
        check_filter(filter)
        with self._lock:
            return sum(1 for r in self._collection(collection).values() if _matches(r, filter))

    def find_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        with self._lock:
            record = self._collection(collection).get(str(record_id))
            return copy.deepcopy(record) if record is not None else None

    def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        now = self._clock()
        stored = copy.deepcopy(dict(record))
        stored.pop("id", None)
        stored.update({"id": str(ObjectId()), "createdAt": now, "updatedAt": now})
        with self._lock:
            self._collection(collection)[stored["id"]] = stored
            return copy.deepcopy(stored)

    def update_by_id(self, collection: str, record_id: str,
                     changes: Mapping[str, Any]) -> Optional[Record]:
        with self._lock:
            record = self._collection(collection).get(str(record_id))
            if record is None:
                return None
            updates = {k: copy.deepcopy(v) for k, v in changes.items()
                       if k not in ("id", "createdAt")}
            record.update(updates)
            record["updatedAt"] = self._clock()
            return copy.deepcopy(record)

    def delete_by_id(self, collection: str, record_id: str) -> bool:
        with self._lock:
            return self._collection(collection).pop(str(record_id), None) is not None

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass
