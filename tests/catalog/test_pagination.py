"""
Unit tests for page filters and the paginator.
"""

import math

import pytest

from catalog.collection import InMemoryCollection
from catalog.exceptions import NoMatchError
from catalog.filters import build_predicate
from catalog.models import BookGenre
from catalog.pagination import PageFilter, PageResult, Paginator


class TestPageFilter:
    """Test cases for PageFilter."""

    @pytest.mark.parametrize("index,size", [(1, 1), (1, 5), (2, 3), (7, 30), (100, 12)])
    def test_skip_and_take(self, index, size):
        """Skip is the number of items on earlier pages, take is the size."""
        page_filter = PageFilter(index, size)

        assert page_filter.skip == (index - 1) * size
        assert page_filter.take == size
        assert page_filter.index == index
        assert page_filter.size == size

    def test_first_page_skips_nothing(self):
        assert PageFilter(1, 10).skip == 0

    def test_is_immutable(self):
        """Derived values cannot be reassigned."""
        page_filter = PageFilter(2, 5)

        with pytest.raises(AttributeError):
            page_filter.skip = 0

    def test_accepts_sizes_above_boundary_limit(self):
        """Size limits are enforced by the HTTP layer, not here."""
        page_filter = PageFilter(1, 500)
        assert page_filter.take == 500


class TestPageResult:
    """Test cases for PageResult metadata."""

    @pytest.mark.parametrize("total_count,size", [(1, 1), (7, 3), (9, 3), (10, 3), (30, 30), (31, 30)])
    def test_page_count_is_ceiling(self, total_count, size):
        result = PageResult.build([], PageFilter(1, size), total_count)
        assert result.page_count == math.ceil(total_count / size)

    def test_echoes_index_and_size(self):
        result = PageResult.build(["a", "b"], PageFilter(2, 2), 5)

        assert result.index == 2
        assert result.size == 2
        assert result.total_count == 5
        assert result.items == ["a", "b"]

    def test_navigation_flags(self):
        first = PageResult.build([], PageFilter(1, 3), 7)
        middle = PageResult.build([], PageFilter(2, 3), 7)
        last = PageResult.build([], PageFilter(3, 3), 7)

        assert first.has_next and not first.has_prev
        assert middle.has_next and middle.has_prev
        assert not last.has_next and last.has_prev


class TestPaginator:
    """Test cases for Paginator over in-memory collections."""

    @pytest.fixture
    def paginator(self):
        return Paginator()

    @pytest.fixture
    def source(self, sample_books):
        return InMemoryCollection(sample_books)

    @pytest.mark.asyncio
    async def test_second_page_of_seven(self, paginator, source, sorted_names):
        """Seven items, index 2, size 3 returns items ranked 4 to 6."""
        result = await paginator.get_page(source, PageFilter(2, 3))

        assert [book.name for book in result.items] == sorted_names[3:6]
        assert result.total_count == 7
        assert result.page_count == 3
        assert result.index == 2
        assert result.size == 3

    @pytest.mark.asyncio
    async def test_last_page_is_partial(self, paginator, source, sorted_names):
        result = await paginator.get_page(source, PageFilter(3, 3))

        assert [book.name for book in result.items] == sorted_names[6:]
        assert not result.has_next

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 2, 3, 4, 7, 10])
    async def test_pages_reconstruct_collection(self, paginator, source, sorted_names, size):
        """Walking pages until the first empty one yields every item once."""
        collected = []
        index = 1
        while True:
            result = await paginator.get_page(source, PageFilter(index, size))
            if not result.items:
                break
            collected.extend(book.name for book in result.items)
            index += 1

        assert collected == sorted_names
        assert index - 1 == math.ceil(len(sorted_names) / size)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("criteria", [
        {"genre": BookGenre.FANTASY},
        {"name": "e"},
        {"author_name": "r", "edition": 1},
    ])
    @pytest.mark.parametrize("size", [1, 2, 4])
    async def test_filtered_pages_reconstruct_matches(self, paginator, source, sample_books, criteria, size):
        """Walking filtered pages yields exactly the matching items in name order."""
        predicate = build_predicate(criteria)
        expected = sorted(book.name for book in sample_books if predicate(book))

        collected = []
        index = 1
        while True:
            result = await paginator.get_page(source, PageFilter(index, size), criteria=criteria)
            assert result.total_count == len(expected)
            if not result.items:
                break
            collected.extend(book.name for book in result.items)
            index += 1

        assert collected == expected
        assert index - 1 == math.ceil(len(expected) / size)

    @pytest.mark.asyncio
    async def test_index_beyond_last_page_is_empty(self, paginator, source):
        """Out-of-range pages are empty but keep the totals of page one."""
        first = await paginator.get_page(source, PageFilter(1, 3))
        beyond = await paginator.get_page(source, PageFilter(10, 3))

        assert beyond.items == []
        assert beyond.total_count == first.total_count == 7
        assert beyond.page_count == first.page_count == 3
        assert not beyond.has_next

    @pytest.mark.asyncio
    @pytest.mark.parametrize("index,size", [(1, 1), (1, 30), (5, 3)])
    async def test_empty_collection_raises(self, paginator, index, size):
        with pytest.raises(NoMatchError):
            await paginator.get_page(InMemoryCollection([]), PageFilter(index, size))

    @pytest.mark.asyncio
    async def test_empty_collection_raises_for_search(self, paginator):
        with pytest.raises(NoMatchError):
            await paginator.get_page(
                InMemoryCollection([]),
                PageFilter(1, 5),
                criteria={"genre": BookGenre.FANTASY}
            )

    @pytest.mark.asyncio
    async def test_no_match_raises(self, paginator, source):
        with pytest.raises(NoMatchError):
            await paginator.get_page(source, PageFilter(1, 5), criteria={"name": "nonexistent title"})

    @pytest.mark.asyncio
    async def test_genre_filter(self, paginator, source):
        """Only Fantasy books are returned, ordered by name and page limited."""
        result = await paginator.get_page(source, PageFilter(1, 2), criteria={"genre": "Fantasy"})

        assert [book.name for book in result.items] == ["A Game of Thrones", "The Hobbit"]
        assert all(book.genre == BookGenre.FANTASY for book in result.items)
        assert result.total_count == 3
        assert result.page_count == 2

        second = await paginator.get_page(source, PageFilter(2, 2), criteria={"genre": "Fantasy"})
        assert [book.name for book in second.items] == ["The Name of the Wind"]

    @pytest.mark.asyncio
    async def test_unset_criteria_match_everything(self, paginator, source):
        result = await paginator.get_page(
            source,
            PageFilter(1, 10),
            criteria={"name": None, "author_name": "", "genre": None, "edition": None}
        )
        assert result.total_count == 7

    @pytest.mark.asyncio
    async def test_mapper_applied_to_page_items(self, paginator, source):
        result = await paginator.get_page(source, PageFilter(1, 2), mapper=lambda book: book.name.upper())
        assert result.items == ["A GAME OF THRONES", "BRAVE NEW WORLD"]

    @pytest.mark.asyncio
    async def test_source_not_modified(self, paginator, sample_books):
        source = InMemoryCollection(sample_books)
        await paginator.get_page(source, PageFilter(2, 2), criteria={"genre": "Fantasy"})

        assert await source.to_list() == sample_books

    @pytest.mark.asyncio
    async def test_custom_sort_key(self, source):
        paginator = Paginator(sort_key="author_name")
        result = await paginator.get_page(source, PageFilter(1, 1))

        assert result.items[0].author_name == "Aldous Huxley"
