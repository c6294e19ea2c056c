"""
Snapshot store

Every piece of persisted state is a JSON blob stored under a string key.
Reads never fail: a missing key, a blob that is not JSON, or a value that does
not validate against the expected model all yield the caller's fallback.

The blob backend is MongoDB when DATABASE_URL is set (collection "snapshot",
one document per key), otherwise a process-local dict.
"""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python
from pymongo import MongoClient

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "superstore")

db = None
if DATABASE_URL:
    db = MongoClient(DATABASE_URL)[DATABASE_NAME]


class MemoryBlobs:
    """Dict-backed blobs; the default when no database is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self):
        return list(self._blobs)


class MongoBlobs:
    def __init__(self, database, collection: str = "snapshot"):
        self.collection = database[collection]

    def read(self, key: str) -> Optional[str]:
        doc = self.collection.find_one({"_id": key})
        return doc.get("value") if doc else None

    def write(self, key: str, blob: str) -> None:
        self.collection.update_one(
            {"_id": key},
            {"$set": {"value": blob, "updated_at": datetime.now(timezone.utc)}},
            upsert=True,
        )

    def delete(self, key: str) -> None:
        self.collection.delete_one({"_id": key})

    def keys(self):
        return [d["_id"] for d in self.collection.find({}, {"_id": 1})]


def decode_or_default(blob: Optional[str], fallback: Any, adapter: Optional[TypeAdapter] = None, key: str = "?"):
    """Decode a JSON blob, validating it when an adapter is given.

    Returns ``fallback`` on a missing blob, malformed JSON or a validation
    error. The error is logged, never raised.
    """
    if blob is None:
        return fallback
    try:
        value = json.loads(blob)
        if adapter is not None:
            value = adapter.validate_python(value)
        return value
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning("Snapshot %r unreadable, using default: %s", key, str(e)[:120])
        return fallback


class SnapshotStore:
    def __init__(self, blobs=None, prefix: str = ""):
        self.blobs = blobs if blobs is not None else MemoryBlobs()
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def load(self, key: str, fallback: Any = None, model: Any = None):
        """Read ``key``; ``model`` is a type such as ``List[Product]`` to validate against."""
        adapter = TypeAdapter(model) if model is not None else None
        return decode_or_default(self.blobs.read(self._key(key)), fallback, adapter, key=self._key(key))

    def save(self, key: str, value: Any) -> None:
        self.blobs.write(self._key(key), json.dumps(to_jsonable_python(value), ensure_ascii=False))

    def delete(self, key: str) -> None:
        self.blobs.delete(self._key(key))

    def scoped(self, prefix: str) -> "SnapshotStore":
        """A view of the same blobs with every key namespaced under ``prefix``."""
        return SnapshotStore(self.blobs, prefix=f"{self.prefix}{prefix}")


def default_blobs():
    if db is not None:
        return MongoBlobs(db)
    return MemoryBlobs()
