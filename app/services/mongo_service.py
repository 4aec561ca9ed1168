"""
MongoDB Service helpers shared by the collection services.

- serialize_doc / serialize_docs: make documents JSON-friendly
- parse_object_id: turn a path/body id into an ObjectId or fail with 400
- utcnow: timezone-aware timestamps for createdAt/updatedAt fields
"""

from datetime import datetime, timezone
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId

from app.core.errors import ValidationError


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            doc[key] = str(value)
    return doc


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def parse_object_id(value, label: str = "ID") -> ObjectId:
    """ObjectId from a client supplied id; 400 if it is malformed."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {label}", error_code="INVALID_ID")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
