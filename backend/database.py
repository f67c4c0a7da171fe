"""
MongoDB access for the school API.

The client is created lazily on first use and shared by every request. Tests
(and anything else that needs a different store) call ``set_db`` first.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient

from config import settings
from errors import Internal

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_client: Optional[MongoClient] = None
_db = None

UNIQUE_INDEXES = {
    "academicyear": "name",
    "student": "studentId",
    "user": "Email",
    "course": "courseName",
}


def ensure_indexes(database) -> None:
    for collection, field in UNIQUE_INDEXES.items():
        database[collection].create_index([(field, ASCENDING)], unique=True)


def get_db():
    global _client, _db
    if _db is not None:
        return _db
    with _lock:
        if _db is None:
            if not settings.DATABASE_URL or not settings.DATABASE_NAME:
                raise Internal("Database not configured")
            client = MongoClient(settings.DATABASE_URL)
            database = client[settings.DATABASE_NAME]
            ensure_indexes(database)
            _client = client
            _db = database
            logger.info("Connected to MongoDB database %s", settings.DATABASE_NAME)
    return _db


def set_db(database) -> None:
    """Replace the shared handle, e.g. with a mongomock database."""
    global _client, _db
    with _lock:
        _client = None
        _db = database
    if database is not None:
        ensure_indexes(database)


def close_db() -> None:
    global _client, _db
    with _lock:
        if _client is not None:
            _client.close()
            logger.info("MongoDB connection closed")
        _client = None
        _db = None


def _to_storage(value: Any) -> Any:
    # BSON keeps naive UTC datetimes
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if isinstance(value, dict):
        return {k: _to_storage(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_storage(v) for v in value]
    return value


def prepare(data: Any) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    return _to_storage(dict(data))


def create_document(collection_name: str, data: Any) -> str:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    doc = prepare(data)
    doc["createdAt"] = now
    doc["updatedAt"] = now
    result = get_db()[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None,
                  sort: Optional[list] = None) -> List[dict]:
    cursor = get_db()[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def serialize(doc: Any) -> Any:
    """Make a stored document JSON friendly: ObjectIds to str, datetimes to ISO."""
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    if isinstance(doc, dict):
        return {k: serialize(v) for k, v in doc.items()}
    if isinstance(doc, list):
        return [serialize(v) for v in doc]
    return doc
