"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, validator

from api.config import config
from catalog.models import Book, BookGenre


class BookCreate(BaseModel):
    """Request body for creating a book."""
    name: str = Field(..., min_length=1, description="Book title")
    author_name: str = Field(..., min_length=1, description="Name of the author")
    genre: BookGenre = Field(..., description="Book genre")
    edition: int = Field(1, ge=1, description="Edition number")

    @validator('name', 'author_name')
    def reject_blank(cls, v):
        """Ensure text fields are not only whitespace."""
        if not v.strip():
            raise ValueError('Field cannot be blank')
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "The Hobbit",
                "author_name": "J. R. R. Tolkien",
                "genre": "Fantasy",
                "edition": 3
            }
        }


class BookUpdate(BaseModel):
    """
    Request body for a partial book update.
    Fields left out or sent as null keep their stored value.
    """
    name: Optional[str] = Field(None, min_length=1, description="Book title")
    author_name: Optional[str] = Field(None, min_length=1, description="Name of the author")
    genre: Optional[BookGenre] = Field(None, description="Book genre")
    edition: Optional[int] = Field(None, ge=1, description="Edition number")

    @validator('name', 'author_name')
    def reject_blank(cls, v):
        """Ensure provided text fields are not only whitespace."""
        if v is not None and not v.strip():
            raise ValueError('Field cannot be blank')
        return v

    def changes(self) -> Dict[str, Any]:
        """Fields that were actually provided."""
        return self.model_dump(exclude_none=True)


class BookFilter(BaseModel):
    """Search request: page parameters plus optional criteria."""
    index: int = Field(1, ge=1, description="Page number")
    size: int = Field(config.default_page_size, ge=1, le=config.max_page_size, description="Items per page")
    name: Optional[str] = Field(None, description="Substring of the book title")
    author_name: Optional[str] = Field(None, description="Substring of the author name")
    genre: Optional[BookGenre] = Field(None, description="Exact genre")
    edition: Optional[int] = Field(None, ge=1, description="Exact edition")

    @validator('name', 'author_name')
    def blank_as_missing(cls, v):
        """Treat blank text criteria as not provided."""
        if v is not None and not v.strip():
            return None
        return v

    def criteria(self) -> Dict[str, Any]:
        """Search criteria without the page parameters."""
        return self.model_dump(exclude={"index", "size"}, exclude_none=True)


class BookResponse(BaseModel):
    """Book response model for API."""
    id: str = Field(..., description="Unique book identifier")
    name: str = Field(..., description="Book title")
    author_name: str = Field(..., description="Name of the author")
    genre: BookGenre = Field(..., description="Book genre")
    edition: int = Field(..., description="Edition number")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @classmethod
    def from_book(cls, book: Book) -> "BookResponse":
        """Copy the public fields of a stored book."""
        return cls(
            id=book.id,
            name=book.name,
            author_name=book.author_name,
            genre=book.genre,
            edition=book.edition,
            created_at=book.created_at,
            updated_at=book.updated_at
        )


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
