from __future__ import annotations

import copy
import math
import re
import threading
from typing import Any, Sequence

import pandas as pd
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from ..errors import StoreError
from .base import SortSpec, assign, lookup, new_id
from .filters import TEXT_SCORE, AnyOf, Contains, Equals, Exists, Filter, Range, Text


def _missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def _values(value: Any) -> list[Any]:
    """Scalar fields behave as one-element lists, like Mongo array matching."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [] if _missing(value) else [value]


def _range_predicate(flt: Range):
    def check(value: Any) -> bool:
        if _missing(value) or isinstance(value, (list, dict)):
            return False
        try:
            if flt.gte is not None and not value >= flt.gte:
                return False
            if flt.lte is not None and not value <= flt.lte:
                return False
        except TypeError:
            return False
        return True

    return check


def _contains_predicate(flt: Contains):
    rx = re.compile(flt.pattern, re.IGNORECASE)
    return lambda value: any(isinstance(v, str) and rx.search(v) for v in _values(value))


def _predicate(flt: Filter):
    if isinstance(flt, Range):
        return _range_predicate(flt)
    if isinstance(flt, Contains):
        return _contains_predicate(flt)
    if isinstance(flt, Equals):
        if flt.value is None:
            return _missing
        return lambda value: flt.value in _values(value)
    if isinstance(flt, AnyOf):
        wanted = set(flt.values)
        return lambda value: any(v in wanted for v in _values(value))
    if isinstance(flt, Exists):
        return lambda value: not _missing(value)
    raise TypeError(f"Unknown filter: {flt!r}")


class MemoryCollection:
    """In-process document collection queried through pandas masks.

    Documents are kept as plain dicts; every query builds one column per
    filtered or sorted field and combines boolean masks, the same way the
    catalogue DataFrame is filtered elsewhere. Text search scores documents
    by TF-IDF cosine similarity over ``text_fields``.
    """

    def __init__(self, name: str, text_fields: Sequence[str] = ()):
        self.name = name
        self.text_fields = tuple(text_fields)
        self._docs: list[dict[str, Any]] = []
        self._lock = threading.RLock()

    # ── internals ────────────────────────────────────────────────────────

    def _snapshot(self) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._docs]

    def _index_of(self, doc_id: str) -> int | None:
        for pos, doc in enumerate(self._docs):
            if doc.get("id") == doc_id:
                return pos
        return None

    @staticmethod
    def _column(docs: list[dict[str, Any]], field: str) -> pd.Series:
        return pd.Series([lookup(d, field) for d in docs], index=range(len(docs)), dtype=object)

    def _text_scores(self, docs: list[dict[str, Any]], query: str) -> pd.Series:
        if not docs:
            return pd.Series(dtype=float)
        corpus = []
        for doc in docs:
            parts: list[str] = []
            for field in self.text_fields:
                parts.extend(str(v) for v in _values(lookup(doc, field)))
            corpus.append(" ".join(parts))
        vectorizer = TfidfVectorizer(stop_words="english")
        try:
            matrix = vectorizer.fit_transform(corpus)
        except ValueError:
            # empty vocabulary: nothing indexable in the collection
            return pd.Series(0.0, index=range(len(docs)))
        scores = cosine_similarity(vectorizer.transform([query]), matrix).flatten()
        return pd.Series(scores, index=range(len(docs)))

    def _select(self, docs: list[dict[str, Any]], filters: Sequence[Filter]) -> tuple[pd.Series, pd.Series | None]:
        mask = pd.Series(True, index=range(len(docs)), dtype=bool)
        scores = None
        for flt in filters:
            if isinstance(flt, Text):
                scores = self._text_scores(docs, flt.query)
                mask &= scores > 0
            else:
                column = self._column(docs, flt.field)
                mask &= column.map(_predicate(flt)).astype(bool)
        return mask, scores

    def _ordered(
        self,
        docs: list[dict[str, Any]],
        filters: Sequence[Filter],
        sort: SortSpec,
    ) -> list[int]:
        mask, scores = self._select(docs, filters)
        selected = list(mask[mask].index)
        if not sort or not selected:
            return selected

        keys = pd.DataFrame(index=selected)
        by: list[str] = []
        ascending: list[bool] = []
        for i, (field, direction) in enumerate(sort):
            col = f"k{i}"
            if field == TEXT_SCORE:
                keys[col] = scores.loc[selected] if scores is not None else 0.0
            else:
                keys[col] = pd.Series([lookup(docs[p], field) for p in selected], index=selected)
            by.append(col)
            ascending.append(direction >= 0)
        try:
            keys = keys.sort_values(by=by, ascending=ascending, kind="mergesort", na_position="last")
        except TypeError as exc:
            raise StoreError(f"Cannot sort {self.name} by {sort!r}") from exc
        return list(keys.index)

    # ── reads ────────────────────────────────────────────────────────────

    def find(
        self,
        filters: Sequence[Filter] = (),
        sort: SortSpec = (),
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        docs = self._snapshot()
        positions = self._ordered(docs, filters, sort)
        end = skip + limit if limit else None
        return [docs[p] for p in positions[skip:end]]

    def count(self, filters: Sequence[Filter] = ()) -> int:
        docs = self._snapshot()
        mask, _ = self._select(docs, filters)
        return int(mask.sum())

    def distinct(self, field: str, filters: Sequence[Filter] = ()) -> list[Any]:
        docs = self._snapshot()
        mask, _ = self._select(docs, filters)
        seen: list[Any] = []
        for value in self._column(docs, field)[mask]:
            for item in _values(value):
                if item not in seen:
                    seen.append(item)
        return seen

    def find_one(self, filters: Sequence[Filter]) -> dict[str, Any] | None:
        found = self.find(filters, limit=1)
        return found[0] if found else None

    def get(self, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            pos = self._index_of(doc_id)
            return copy.deepcopy(self._docs[pos]) if pos is not None else None

    # ── writes ───────────────────────────────────────────────────────────

    def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(doc)
        stored.setdefault("id", new_id())
        with self._lock:
            if self._index_of(stored["id"]) is not None:
                raise StoreError(f"Duplicate id {stored['id']} in {self.name}")
            self._docs.append(stored)
        return copy.deepcopy(stored)

    def update(self, doc_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            pos = self._index_of(doc_id)
            if pos is None:
                return None
            doc = self._docs[pos]
            for path, value in changes.items():
                assign(doc, path, copy.deepcopy(value))
            return copy.deepcopy(doc)

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            pos = self._index_of(doc_id)
            if pos is None:
                return False
            del self._docs[pos]
            return True

    def add_to_set(self, doc_id: str, field: str, value: Any) -> dict[str, Any] | None:
        with self._lock:
            pos = self._index_of(doc_id)
            if pos is None:
                return None
            doc = self._docs[pos]
            current = lookup(doc, field)
            items = list(current) if isinstance(current, list) else []
            if value not in items:
                items.append(value)
            assign(doc, field, items)
            return copy.deepcopy(doc)

    def pull(self, doc_id: str, field: str, value: Any) -> dict[str, Any] | None:
        with self._lock:
            pos = self._index_of(doc_id)
            if pos is None:
                return None
            doc = self._docs[pos]
            current = lookup(doc, field)
            items = [v for v in current if v != value] if isinstance(current, list) else []
            assign(doc, field, items)
            return copy.deepcopy(doc)
