"""
MongoDB access helpers shared by the API routes.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient

from config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()
_client = None
db = None

if _settings.database_url and _settings.database_name:
    _client = MongoClient(_settings.database_url)
    db = _client[_settings.database_name]
else:
    logger.warning("DATABASE_URL/DATABASE_NAME not set; database helpers are unavailable")


def _require_db():
    if db is None:
        raise RuntimeError("Database not available")
    return db


def _object_id(document_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(document_id)
    except (InvalidId, TypeError):
        return None


def _as_dict(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    doc = _as_dict(data)
    now = datetime.now(timezone.utc)
    doc["created_at"] = now
    doc["updated_at"] = now
    result = _require_db()[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = _require_db()[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document(collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
    oid = _object_id(document_id)
    if oid is None:
        return None
    return _require_db()[collection_name].find_one({"_id": oid})


def update_document(collection_name: str, document_id: str, data: Union[BaseModel, Dict[str, Any]]) -> bool:
    oid = _object_id(document_id)
    if oid is None:
        return False
    doc = _as_dict(data)
    doc["updated_at"] = datetime.now(timezone.utc)
    result = _require_db()[collection_name].update_one({"_id": oid}, {"$set": doc})
    return result.matched_count > 0


def delete_document(collection_name: str, document_id: str) -> bool:
    oid = _object_id(document_id)
    if oid is None:
        return False
    result = _require_db()[collection_name].delete_one({"_id": oid})
    return result.deleted_count > 0
