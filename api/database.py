"""
Book service layer for the FastAPI application.
"""

from datetime import datetime, timezone
from typing import Dict

import structlog

from api.models import BookCreate, BookFilter, BookResponse, BookUpdate
from catalog.database import BookRepository
from catalog.exceptions import ResourceNotFoundError
from catalog.models import Book
from catalog.pagination import PageFilter, PageResult, Paginator

logger = structlog.get_logger(__name__)


class BookService:
    """Book operations behind the HTTP routes."""

    def __init__(self, repository: BookRepository, paginator: Paginator = None):
        self.repository = repository
        self.paginator = paginator or Paginator()

    async def get_page(self, index: int, size: int) -> PageResult:
        """
        Get one page of all books, ordered by name.

        Args:
            index: Page number (starts from 1)
            size: Books per page

        Returns:
            PageResult of BookResponse items

        Raises:
            NoMatchError: If the catalog is empty
        """
        page_filter = PageFilter(index, size)
        return await self.paginator.get_page(
            self.repository.query(),
            page_filter,
            mapper=BookResponse.from_book
        )

    async def search(self, book_filter: BookFilter) -> PageResult:
        """
        Get one page of books matching the search criteria.

        Args:
            book_filter: Page parameters and optional criteria

        Returns:
            PageResult of BookResponse items

        Raises:
            NoMatchError: If no book matches the criteria
        """
        page_filter = PageFilter(book_filter.index, book_filter.size)
        criteria = book_filter.criteria()
        logger.debug("Searching books", criteria=criteria, index=page_filter.index, size=page_filter.size)

        return await self.paginator.get_page(
            self.repository.query(),
            page_filter,
            criteria=criteria,
            mapper=BookResponse.from_book
        )

    async def _require(self, book_id: str) -> Book:
        book = await self.repository.get(book_id)
        if book is None:
            raise ResourceNotFoundError(f"Book with ID '{book_id}' not found")
        return book

    async def get_one(self, book_id: str) -> BookResponse:
        """Get a single book by ID."""
        book = await self._require(book_id)
        return BookResponse.from_book(book)

    async def create(self, payload: BookCreate) -> BookResponse:
        """
        Create a book.

        Raises:
            DuplicateBookError: If author, name, genre and edition already exist
        """
        book = await self.repository.add(Book(**payload.model_dump()))
        logger.info("Book created", book_id=book.id, book_name=book.name)
        return BookResponse.from_book(book)

    async def update_one(self, book_id: str, payload: BookUpdate) -> BookResponse:
        """
        Update the provided fields of a book; null fields are ignored.

        Raises:
            ResourceNotFoundError: If the book does not exist
            DuplicateBookError: If the change collides with another book
        """
        book = await self._require(book_id)
        changes = payload.changes()

        values: Dict = book.model_dump()
        values.update(changes)
        values["updated_at"] = datetime.now(timezone.utc)

        updated = await self.repository.update(Book(**values))
        logger.info("Book updated", book_id=book_id, fields=sorted(changes))
        return BookResponse.from_book(updated)

    async def delete_one(self, book_id: str) -> None:
        """
        Delete a book.

        Raises:
            ResourceNotFoundError: If the book does not exist
        """
        if not await self.repository.delete(book_id):
            raise ResourceNotFoundError(f"Book with ID '{book_id}' not found")
        logger.info("Book deleted", book_id=book_id)

    async def health_check(self) -> Dict:
        return await self.repository.health_check()
