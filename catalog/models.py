"""
Pydantic models for the book catalog.
Defines the stored Book entity and its genre enumeration.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, validator


class BookGenre(str, Enum):
    """Enum for book genres."""
    FANTASY = "Fantasy"
    FICTION = "Fiction"
    SCIENCE_FICTION = "Science Fiction"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    HORROR = "Horror"
    POETRY = "Poetry"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    TECHNICAL = "Technical"
    OTHER = "Other"


# Fields that identify a book; no two stored books may share all of them.
UNIQUE_KEY_FIELDS = ("author_name", "name", "genre", "edition")


class Book(BaseModel):
    """
    Stored book entity.
    """
    id: Optional[str] = Field(None, description="Unique book identifier")
    name: str = Field(..., min_length=1, description="Book title")
    author_name: str = Field(..., min_length=1, description="Name of the author")
    genre: BookGenre = Field(..., description="Book genre")
    edition: int = Field(1, ge=1, description="Edition number")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Creation timestamp")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Last update timestamp")

    @validator('name', 'author_name')
    def strip_text(cls, v):
        """Trim surrounding whitespace from text fields."""
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    def unique_key(self) -> Dict[str, Any]:
        """Return the fields that make a book unique."""
        return {
            "author_name": self.author_name,
            "name": self.name,
            "genre": self.genre.value,
            "edition": self.edition,
        }

    def to_document(self) -> Dict[str, Any]:
        """Convert to a MongoDB document (without the id)."""
        document = self.model_dump(exclude={"id"})
        document["genre"] = self.genre.value
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        """Build a Book from a MongoDB document."""
        document = dict(document)
        if "_id" in document:
            document["id"] = str(document.pop("_id"))
        return cls(**document)

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "id": "6650f1b2c8a4e3d1f0a1b2c3",
                "name": "The Hobbit",
                "author_name": "J. R. R. Tolkien",
                "genre": "Fantasy",
                "edition": 3,
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z"
            }
        }
