"""
Queryable collection sources.

A source supports filtering, ordering, skipping and taking. Each of those
returns a new source; only count() and to_list() touch the underlying data.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from .filters import Predicate

logger = structlog.get_logger(__name__)


class CollectionSource(ABC):
    """Ordered, filterable view over a collection of entities."""

    @abstractmethod
    def where(self, predicate: Predicate) -> "CollectionSource":
        """Narrow the source to items accepted by the predicate."""

    @abstractmethod
    def order_by(self, *fields: str) -> "CollectionSource":
        """Order ascending by the given fields."""

    @abstractmethod
    def skip(self, count: int) -> "CollectionSource":
        """Drop the first `count` items."""

    @abstractmethod
    def take(self, count: int) -> "CollectionSource":
        """Keep at most `count` items."""

    @abstractmethod
    async def count(self) -> int:
        """Count the items currently in view."""

    @abstractmethod
    async def to_list(self) -> List[Any]:
        """Materialize the items."""


def _sort_value(item: Any, field: str) -> Any:
    if isinstance(item, dict):
        return item.get(field)
    return getattr(item, field)


class InMemoryCollection(CollectionSource):
    """Collection source over a Python sequence."""

    def __init__(self, items: Sequence[Any] = ()):
        self._items: Tuple[Any, ...] = tuple(items)

    def where(self, predicate: Predicate) -> "InMemoryCollection":
        return InMemoryCollection([item for item in self._items if predicate(item)])

    def order_by(self, *fields: str) -> "InMemoryCollection":
        items = list(self._items)
        # sorted() is stable, so sort by the least significant field first
        for field in reversed(fields):
            items = sorted(items, key=lambda item: _sort_value(item, field))
        return InMemoryCollection(items)

    def skip(self, count: int) -> "InMemoryCollection":
        return InMemoryCollection(self._items[max(count, 0):])

    def take(self, count: int) -> "InMemoryCollection":
        return InMemoryCollection(self._items[:max(count, 0)])

    async def count(self) -> int:
        return len(self._items)

    async def to_list(self) -> List[Any]:
        return list(self._items)


class MongoCollection(CollectionSource):
    """
    Collection source backed by a motor collection.

    Builds up a filter document, sort specification and skip/limit window,
    and only talks to MongoDB when counted or materialized.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        document_factory: Callable[[Dict[str, Any]], Any] = dict,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[List[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ):
        self.collection = collection
        self.document_factory = document_factory
        self.query: Dict[str, Any] = query or {}
        self.sort: List[Tuple[str, int]] = sort or []
        self._skip = skip
        self._limit = limit

    def _copy(self, **changes) -> "MongoCollection":
        state = {
            "query": self.query,
            "sort": self.sort,
            "skip": self._skip,
            "limit": self._limit,
        }
        state.update(changes)
        return MongoCollection(self.collection, self.document_factory, **state)

    def where(self, predicate: Predicate) -> "MongoCollection":
        if predicate.is_identity:
            return self
        condition = predicate.to_mongo()
        if not self.query:
            return self._copy(query=condition)
        return self._copy(query={"$and": [self.query, condition]})

    def order_by(self, *fields: str) -> "MongoCollection":
        sort = [(field, 1) for field in fields]
        # _id breaks ties so equal names always come back in the same order
        if "_id" not in fields:
            sort.append(("_id", 1))
        return self._copy(sort=sort)

    def skip(self, count: int) -> "MongoCollection":
        count = max(count, 0)
        limit = self._limit
        if limit is not None:
            limit = max(limit - count, 0)
        return self._copy(skip=self._skip + count, limit=limit)

    def take(self, count: int) -> "MongoCollection":
        count = max(count, 0)
        limit = count if self._limit is None else min(self._limit, count)
        return self._copy(limit=limit)

    async def count(self) -> int:
        options = {}
        if self._skip:
            options["skip"] = self._skip
        if self._limit is not None:
            if self._limit == 0:
                return 0
            options["limit"] = self._limit
        return await self.collection.count_documents(self.query, **options)

    async def to_list(self) -> List[Any]:
        if self._limit == 0:
            return []

        cursor = self.collection.find(self.query)
        if self.sort:
            cursor = cursor.sort(self.sort)
        if self._skip:
            cursor = cursor.skip(self._skip)
        if self._limit is not None:
            cursor = cursor.limit(self._limit)

        documents = await cursor.to_list(length=self._limit)
        logger.debug(
            "Fetched documents",
            collection=getattr(self.collection, "name", None),
            query=self.query,
            skip=self._skip,
            limit=self._limit,
            returned=len(documents)
        )
        return [self.document_factory(document) for document in documents]
