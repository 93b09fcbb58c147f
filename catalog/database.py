"""
Book storage.
MongoDB repository for production use and an in-memory repository for
development and tests. Both expose the same operations.
"""

import itertools
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, DuplicateKeyError

from .collection import CollectionSource, InMemoryCollection, MongoCollection
from .exceptions import DuplicateBookError
from .models import UNIQUE_KEY_FIELDS, Book

logger = structlog.get_logger(__name__)


class BookRepository(ABC):
    """Storage operations for books."""

    @abstractmethod
    def query(self) -> CollectionSource:
        """Return a collection source over every stored book."""

    @abstractmethod
    async def get(self, book_id: str) -> Optional[Book]:
        """Return the book with the given id, or None."""

    @abstractmethod
    async def add(self, book: Book) -> Book:
        """Store a new book and return it with its id set."""

    @abstractmethod
    async def update(self, book: Book) -> Book:
        """Replace a stored book."""

    @abstractmethod
    async def delete(self, book_id: str) -> bool:
        """Delete a book. Returns False if it did not exist."""

    @abstractmethod
    async def health_check(self) -> Dict:
        """Report storage status."""


class InMemoryBookRepository(BookRepository):
    """Dictionary-backed book storage."""

    def __init__(self, books: Iterable[Book] = ()):
        self._books: Dict[str, Book] = {}
        self._ids = itertools.count(1)
        for book in books:
            self._store(book)

    def _store(self, book: Book) -> Book:
        self._check_unique(book)
        if book.id is not None and book.id in self._books:
            raise DuplicateBookError(f"Book id {book.id} already exists")
        stored = book.model_copy(update={"id": book.id or self._next_id()})
        self._books[stored.id] = stored
        return stored

    def _next_id(self) -> str:
        book_id = str(next(self._ids))
        while book_id in self._books:
            book_id = str(next(self._ids))
        return book_id

    def _check_unique(self, book: Book) -> None:
        key = book.unique_key()
        for other in self._books.values():
            if other.id != book.id and other.unique_key() == key:
                logger.warning("Book already exists", **key)
                raise DuplicateBookError(key=key)

    def query(self) -> InMemoryCollection:
        return InMemoryCollection(list(self._books.values()))

    async def get(self, book_id: str) -> Optional[Book]:
        return self._books.get(book_id)

    async def add(self, book: Book) -> Book:
        return self._store(book.model_copy(update={"id": None}))

    async def update(self, book: Book) -> Book:
        self._check_unique(book)
        self._books[book.id] = book
        return book

    async def delete(self, book_id: str) -> bool:
        return self._books.pop(book_id, None) is not None

    async def health_check(self) -> Dict:
        return {"status": "healthy", "backend": "memory", "books_count": len(self._books)}


class MongoBookRepository(BookRepository):
    """
    Async MongoDB repository for books.
    Handles connection, indexing, and CRUD operations.
    """

    def __init__(self, connection_url: str, database_name: str, collection_name: str = "books"):
        """
        Initialize MongoDB repository.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            collection_name: Name of the books collection
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.collection_name = collection_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.collection: Optional[AsyncIOMotorCollection] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(self.connection_url)
            self.database = self.client[self.database_name]
            self.collection = self.database[self.collection_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info("Successfully connected to MongoDB",
                        database=self.database_name,
                        collection=self.collection_name)

            await self._create_indexes()

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def _create_indexes(self) -> None:
        """Create the ordering index and the unique book key."""
        try:
            # Ordering for pagination
            await self.collection.create_index("name")

            # Author, name, genre and edition identify a book
            await self.collection.create_index(
                [(field, 1) for field in UNIQUE_KEY_FIELDS],
                unique=True,
                name="unique_book"
            )

            logger.info("Successfully created MongoDB indexes")

        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    def query(self) -> MongoCollection:
        return MongoCollection(self.collection, Book.from_document)

    async def get(self, book_id: str) -> Optional[Book]:
        if not ObjectId.is_valid(book_id):
            return None

        document = await self.collection.find_one({"_id": ObjectId(book_id)})
        if document is None:
            return None
        return Book.from_document(document)

    async def add(self, book: Book) -> Book:
        try:
            result = await self.collection.insert_one(book.to_document())
        except DuplicateKeyError:
            logger.warning("Book already exists", **book.unique_key())
            raise DuplicateBookError(key=book.unique_key())

        stored = book.model_copy(update={"id": str(result.inserted_id)})
        logger.debug("Successfully inserted book", book_id=stored.id, book_name=stored.name)
        return stored

    async def update(self, book: Book) -> Book:
        try:
            await self.collection.replace_one({"_id": ObjectId(book.id)}, book.to_document())
        except DuplicateKeyError:
            logger.warning("Book already exists", book_id=book.id, **book.unique_key())
            raise DuplicateBookError(key=book.unique_key())

        logger.debug("Successfully updated book", book_id=book.id)
        return book

    async def delete(self, book_id: str) -> bool:
        if not ObjectId.is_valid(book_id):
            return False

        result = await self.collection.delete_one({"_id": ObjectId(book_id)})
        return result.deleted_count > 0

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.collection.count_documents({})

            return {
                "status": "healthy",
                "backend": "mongodb",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
