from __future__ import annotations

import functools
import logging
from typing import Any, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument, TEXT
from pymongo.collection import Collection as PyMongoCollection
from pymongo.errors import PyMongoError

from ..errors import StoreError
from .base import SortSpec
from .filters import TEXT_SCORE, Filter, has_text, to_mongo

logger = logging.getLogger(__name__)

_SCORE_FIELD = "_textScore"


def _wrap_errors(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except PyMongoError as exc:
            raise StoreError(f"{self.name}.{method.__name__} failed: {exc}") from exc

    return wrapper


def _convert(field: str, value: Any) -> tuple[str, Any]:
    if field != "id":
        return field, value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return "_id", ObjectId(value)
    return "_id", value


def _id_query(doc_id: str) -> dict[str, Any]:
    field, value = _convert("id", doc_id)
    return {field: value}


def sanitize(doc: dict | None) -> dict | None:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    d.pop(_SCORE_FIELD, None)
    return d


class MongoCollection:
    """Collection contract over a pymongo collection."""

    def __init__(self, collection: PyMongoCollection):
        self._coll = collection
        self.name = collection.name

    @_wrap_errors
    def find(
        self,
        filters: Sequence[Filter] = (),
        sort: SortSpec = (),
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        query = to_mongo(filters, _convert)
        projection = {_SCORE_FIELD: {"$meta": "textScore"}} if has_text(filters) else None
        cursor = self._coll.find(query, projection)
        if sort:
            order = []
            for field, direction in sort:
                if field == TEXT_SCORE:
                    order.append((_SCORE_FIELD, {"$meta": "textScore"}))
                else:
                    order.append((_convert(field, None)[0], ASCENDING if direction >= 0 else DESCENDING))
            cursor = cursor.sort(order)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [sanitize(doc) for doc in cursor]

    @_wrap_errors
    def count(self, filters: Sequence[Filter] = ()) -> int:
        return self._coll.count_documents(to_mongo(filters, _convert))

    @_wrap_errors
    def distinct(self, field: str, filters: Sequence[Filter] = ()) -> list[Any]:
        return self._coll.distinct(field, to_mongo(filters, _convert))

    @_wrap_errors
    def find_one(self, filters: Sequence[Filter]) -> dict[str, Any] | None:
        return sanitize(self._coll.find_one(to_mongo(filters, _convert)))

    @_wrap_errors
    def get(self, doc_id: str) -> dict[str, Any] | None:
        return sanitize(self._coll.find_one(_id_query(doc_id)))

    @_wrap_errors
    def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        stored = {k: v for k, v in doc.items() if k != "id"}
        if doc.get("id"):
            stored["_id"] = _convert("id", doc["id"])[1]
        result = self._coll.insert_one(stored)
        stored["_id"] = result.inserted_id
        return sanitize(stored)

    @_wrap_errors
    def update(self, doc_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        doc = self._coll.find_one_and_update(
            _id_query(doc_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return sanitize(doc)

    @_wrap_errors
    def delete(self, doc_id: str) -> bool:
        return self._coll.delete_one(_id_query(doc_id)).deleted_count > 0

    @_wrap_errors
    def add_to_set(self, doc_id: str, field: str, value: Any) -> dict[str, Any] | None:
        doc = self._coll.find_one_and_update(
            _id_query(doc_id),
            {"$addToSet": {field: value}},
            return_document=ReturnDocument.AFTER,
        )
        return sanitize(doc)

    @_wrap_errors
    def pull(self, doc_id: str, field: str, value: Any) -> dict[str, Any] | None:
        doc = self._coll.find_one_and_update(
            _id_query(doc_id),
            {"$pull": {field: value}},
            return_document=ReturnDocument.AFTER,
        )
        return sanitize(doc)


def ensure_indexes(db) -> None:
    """Create the text and lookup indexes the query layer relies on."""
    specs = [
        (
            "exhibitions",
            [
                ("title", TEXT),
                ("description", TEXT),
                ("location.name", TEXT),
                ("location.city", TEXT),
                ("location.country", TEXT),
                ("artists", TEXT),
                ("category", TEXT),
                ("tags", TEXT),
            ],
            {"name": "exhibition_text"},
        ),
        ("exhibitions", [("startDate", ASCENDING), ("endDate", ASCENDING)], {}),
        ("exhibitions", [("venueId", ASCENDING)], {}),
        (
            "venues",
            [("name", TEXT), ("address", TEXT), ("city", TEXT), ("country", TEXT), ("notes", TEXT)],
            {"name": "venue_text"},
        ),
        ("users", [("email", ASCENDING)], {"unique": True}),
        ("tags", [("slug", ASCENDING)], {"unique": True}),
        ("artists", [("slug", ASCENDING)], {"unique": True}),
        ("newsletter", [("email", ASCENDING)], {"unique": True}),
        ("newsletter", [("token", ASCENDING)], {}),
        ("pageviews", [("createdAt", DESCENDING)], {}),
        ("events", [("eventType", ASCENDING), ("createdAt", DESCENDING)], {}),
    ]
    for name, keys, options in specs:
        try:
            db[name].create_index(keys, **options)
        except PyMongoError as exc:
            logger.warning("Index on %s %s failed: %s", name, keys, exc)


def connect(uri: str, db_name: str) -> tuple[MongoClient, Any]:
    client = MongoClient(uri, tz_aware=True)
    db = client[db_name]
    ensure_indexes(db)
    logger.info("Connected to MongoDB database %s", db_name)
    return client, db
