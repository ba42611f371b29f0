"""MongoDB implementation of DocumentStore.

Wraps one pymongo async collection. Documents travel as plain dicts keyed
by their stored (camelCase) names; to_json() produces the API shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from bson import ObjectId

from shared.datetime_utils import ensure_utc
from shared.logging import get_logger

log = get_logger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat().replace("+00:00", "Z")
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class MongoDocumentStore:
    def __init__(self, collection, hidden_fields: Iterable[str] = ()) -> None:
        self._collection = collection
        self._hidden = frozenset(hidden_fields)

    @property
    def name(self) -> str:
        return self._collection.name

    async def ensure_indexes(self, unique_email: bool = False) -> None:
        if unique_email:
            await self._collection.create_index("email", unique=True)
            log.info("store_index_ensured", collection=self.name, field="email")

    async def find_one(self, filter: dict[str, Any]) -> Optional[dict]:
        return await self._collection.find_one(filter)

    async def find(
        self,
        filter: dict[str, Any],
        sort: Optional[list[tuple[str, int]]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> list[dict]:
        cursor = self._collection.find(filter)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(None)

    async def count(self, filter: dict[str, Any]) -> int:
        return await self._collection.count_documents(filter)

    async def insert(self, doc: dict) -> dict:
        result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def save(self, doc: dict) -> dict:
        """Replace the stored document with *doc* (insert when it has no _id)."""
        if doc.get("_id") is None:
            doc.pop("_id", None)
            return await self.insert(doc)
        await self._collection.replace_one({"_id": doc["_id"]}, doc)
        return doc

    async def delete(self, filter: dict[str, Any]) -> Optional[dict]:
        return await self._collection.find_one_and_delete(filter)

    def to_json(self, doc: dict, virtuals: bool = True) -> dict:
        """Return an API-safe copy of *doc*.

        Hidden fields are dropped; ObjectIds and datetimes become strings.
        With *virtuals*, ``_id`` is exposed as ``id``.
        """
        out: dict[str, Any] = {}
        for key, value in doc.items():
            if key in self._hidden:
                continue
            if key == "_id" and virtuals:
                out["id"] = _jsonable(value)
                continue
            out[key] = _jsonable(value)
        return out
