"""
app/db/pagination.py

Purpose: Cursor-based paging over MongoDB queries

- Keyset pagination on (timestamp desc, _id desc)
- Opaque URL-safe cursor tokens
"""

import base64
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import DESCENDING

from app.core.exceptions import ValidationError


def encode_cursor(timestamp: datetime, doc_id: str) -> str:
    raw = json.dumps({"t": timestamp.isoformat(), "id": doc_id})
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    try:
        raw = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(raw["t"]), raw["id"]
    except (ValueError, KeyError, TypeError) as e:
        raise ValidationError("Invalid page cursor") from e


async def find_page(
    collection: AsyncIOMotorCollection,
    query: Dict[str, Any],
    sort_field: str,
    page_size: int,
    cursor: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], Optional[str], bool]:
    """
    Fetches one page of documents ordered newest first.

    Args:
        collection: Collection to query
        query: Base filter
        sort_field: Datetime field to order by
        page_size: Number of documents per page
        cursor: Token returned by the previous page

    Returns:
        (documents, next_cursor, has_more)
    """
    if cursor:
        timestamp, last_id = decode_cursor(cursor)
        after = {
            "$or": [
                {sort_field: {"$lt": timestamp}},
                {sort_field: timestamp, "_id": {"$lt": last_id}},
            ]
        }
        query = {"$and": [query, after]} if query else after

    docs = await (
        collection.find(query)
        .sort([(sort_field, DESCENDING), ("_id", DESCENDING)])
        .limit(page_size + 1)
        .to_list(length=page_size + 1)
    )

    has_more = len(docs) > page_size
    docs = docs[:page_size]

    next_cursor = None
    if has_more and docs:
        last = docs[-1]
        next_cursor = encode_cursor(last[sort_field], last["_id"])

    return docs, next_cursor, has_more
