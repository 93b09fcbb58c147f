"""
Pytest configuration and shared fixtures.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from catalog.database import InMemoryBookRepository
from catalog.models import Book, BookGenre


@pytest.fixture
def sample_books():
    """Seven books in no particular order."""
    return [
        Book(name="The Hobbit", author_name="J. R. R. Tolkien", genre=BookGenre.FANTASY, edition=3),
        Book(name="Dune", author_name="Frank Herbert", genre=BookGenre.SCIENCE_FICTION, edition=1),
        Book(name="Gone Girl", author_name="Gillian Flynn", genre=BookGenre.MYSTERY, edition=1),
        Book(name="A Game of Thrones", author_name="George R. R. Martin", genre=BookGenre.FANTASY, edition=1),
        Book(name="Emma", author_name="Jane Austen", genre=BookGenre.ROMANCE, edition=1),
        Book(name="The Name of the Wind", author_name="Patrick Rothfuss", genre=BookGenre.FANTASY, edition=1),
        Book(name="Brave New World", author_name="Aldous Huxley", genre=BookGenre.SCIENCE_FICTION, edition=2),
    ]


@pytest.fixture
def sorted_names():
    """Names of the sample books in catalog order."""
    return [
        "A Game of Thrones",
        "Brave New World",
        "Dune",
        "Emma",
        "Gone Girl",
        "The Hobbit",
        "The Name of the Wind",
    ]


@pytest.fixture
def book_repository(sample_books):
    """In-memory repository seeded with the sample books."""
    return InMemoryBookRepository(sample_books)


@pytest.fixture
def empty_repository():
    """In-memory repository with no books."""
    return InMemoryBookRepository()


@pytest.fixture
def mock_cursor():
    """Chainable motor cursor mock."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    return cursor


@pytest.fixture
def mock_collection(mock_cursor):
    """Motor collection mock returning `mock_cursor` from find()."""
    collection = MagicMock()
    collection.name = "books"
    collection.find.return_value = mock_cursor
    collection.count_documents = AsyncMock(return_value=0)
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.replace_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.create_index = AsyncMock()
    return collection
