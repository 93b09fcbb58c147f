"""
Page filtering and pagination over collection sources.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Mapping, Optional, TypeVar

import structlog
from pydantic import BaseModel, Field

from .collection import CollectionSource
from .exceptions import NoMatchError
from .filters import BOOK_FILTER_RULES, MatchKind, build_predicate

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PageFilter:
    """
    Requested page turned into an offset/limit pair.

    `index` is 1-based. Range checks on index and size belong to the caller.
    """
    index: int
    size: int
    skip: int = field(init=False)
    take: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "skip", (self.index - 1) * self.size)
        object.__setattr__(self, "take", self.size)


class PageResult(BaseModel, Generic[T]):
    """One page of items plus pagination metadata."""
    items: List[T] = Field(..., description="Items on the current page")
    total_count: int = Field(..., ge=0, description="Total number of matching items")
    index: int = Field(..., description="Current page number")
    size: int = Field(..., description="Number of items per page")
    page_count: int = Field(..., description="Total number of pages")
    has_next: bool = Field(..., description="Whether there is a next page")
    has_prev: bool = Field(..., description="Whether there is a previous page")

    @classmethod
    def build(cls, items: List[Any], page_filter: PageFilter, total_count: int) -> "PageResult":
        """Package a page slice with metadata derived from the filter."""
        page_count = math.ceil(total_count / page_filter.size)
        return cls(
            items=items,
            total_count=total_count,
            index=page_filter.index,
            size=page_filter.size,
            page_count=page_count,
            has_next=page_filter.index < page_count,
            has_prev=page_filter.index > 1
        )


class Paginator:
    """
    Produces pages from a collection source.

    Criteria are turned into a predicate using `rules`; matching items are
    counted, ordered by `sort_key` and sliced with the page filter.
    """

    def __init__(
        self,
        rules: Mapping[str, MatchKind] = BOOK_FILTER_RULES,
        sort_key: str = "name",
    ):
        self.rules = rules
        self.sort_key = sort_key

    async def get_page(
        self,
        source: CollectionSource,
        page_filter: PageFilter,
        criteria: Optional[Mapping[str, Any]] = None,
        mapper: Optional[Callable[[Any], Any]] = None,
    ) -> PageResult:
        """
        Get one page of items matching the criteria.

        Args:
            source: Collection to read from
            page_filter: Requested page
            criteria: Optional sparse search criteria
            mapper: Optional conversion applied to each item on the page

        Returns:
            PageResult with the page slice and metadata

        Raises:
            NoMatchError: If nothing matches the criteria
        """
        predicate = build_predicate(criteria, self.rules)
        query = source.where(predicate)

        total_count = await query.count()
        if total_count < 1:
            logger.info(
                "No items matched",
                index=page_filter.index,
                size=page_filter.size,
                conditions=len(predicate.conditions)
            )
            raise NoMatchError()

        page = await (
            query
            .order_by(self.sort_key)
            .skip(page_filter.skip)
            .take(page_filter.take)
            .to_list()
        )

        if mapper is not None:
            page = [mapper(item) for item in page]

        logger.debug(
            "Page retrieved",
            index=page_filter.index,
            size=page_filter.size,
            total_count=total_count,
            returned=len(page)
        )
        return PageResult.build(page, page_filter, total_count)
