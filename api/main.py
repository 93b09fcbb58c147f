"""
FastAPI main application for the Bookstore Catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.auth import verify_api_key
from api.config import config
from api.database import BookService
from api.models import (
    BookCreate, BookFilter, BookResponse, BookUpdate,
    ErrorResponse, HealthResponse
)
from catalog.database import InMemoryBookRepository, MongoBookRepository
from catalog.exceptions import DuplicateBookError, ResourceNotFoundError
from catalog.pagination import PageResult
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

# Global book service
book_service: BookService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global book_service

    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )
    logger.info("Starting Bookstore Catalog API", storage_backend=config.storage_backend)

    repository = None
    if config.storage_backend == "memory":
        book_service = BookService(InMemoryBookRepository())
    else:
        repository = MongoBookRepository(
            connection_url=config.mongodb_url,
            database_name=config.mongodb_database,
            collection_name=config.mongodb_collection
        )
        try:
            await repository.connect()
        except Exception as e:
            logger.error("Failed to connect to database", error=str(e))
            raise
        book_service = BookService(repository)

    yield

    logger.info("Shutting down Bookstore Catalog API")
    if repository:
        await repository.disconnect()
    book_service = None


app = FastAPI(
    title=config.api_title,
    description="""
    A REST API for browsing and maintaining a book catalog.

    ## Features

    * **Browsing**: Books ordered by name, paginated with `index` and `size`
    * **Search**: Filter by title or author substring, genre and edition
    * **Maintenance**: Create, partially update and delete books

    ## Authentication

    Reading is anonymous. Creating, updating and deleting require an API key:

    ```
    Authorization: Bearer your_api_key_here
    ```
    """,
    version=config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


def get_book_service() -> BookService:
    """Return the active book service."""
    if not book_service:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return book_service


# Exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.detail,
            status_code=exc.status_code
        ).model_dump(),
        headers=exc.headers
    )


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(request, exc: ResourceNotFoundError):
    """Handle missing books and empty pages."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(
            error=exc.message,
            status_code=status.HTTP_404_NOT_FOUND
        ).model_dump()
    )


@app.exception_handler(DuplicateBookError)
async def duplicate_book_handler(request, exc: DuplicateBookError):
    """Handle uniqueness violations."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=ErrorResponse(
            error=exc.message,
            detail="A book with the same author, name, genre and edition already exists",
            status_code=status.HTTP_409_CONFLICT
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


# Health check endpoint (no authentication required)
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    try:
        if book_service:
            health_info = await book_service.health_check()
            db_status = health_info.get("status", "unknown")
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        db_status = "unhealthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.get("/books", response_model=PageResult[BookResponse], tags=["Books"])
async def get_books(
    index: int = Query(1, ge=1, description="Page number (starts from 1)"),
    size: int = Query(config.default_page_size, ge=1, le=config.max_page_size, description="Books per page"),
    service: BookService = Depends(get_book_service)
):
    """
    Get all books ordered by name, one page at a time.

    - **index**: Page number (starts from 1)
    - **size**: Books per page (1-30)

    Answers 404 when the catalog is empty. A page past the last one is
    returned empty.
    """
    return await service.get_page(index, size)


@app.post("/books/search", response_model=PageResult[BookResponse], tags=["Books"])
async def search_books(
    book_filter: BookFilter,
    service: BookService = Depends(get_book_service)
):
    """
    Search books, one page at a time.

    - **name**: Title contains this text (case-insensitive)
    - **author_name**: Author name contains this text (case-insensitive)
    - **genre**: Exact genre
    - **edition**: Exact edition

    Criteria left out match every book. Answers 404 when nothing matches.
    """
    return await service.search(book_filter)


@app.get("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service)
):
    """Get a single book by ID."""
    return await service.get_one(book_id)


@app.post(
    "/books",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def create_book(
    payload: BookCreate,
    response: Response,
    api_key: str = Depends(verify_api_key),
    service: BookService = Depends(get_book_service)
):
    """
    Create a book.

    Books are unique by author name, name, genre and edition.
    """
    created = await service.create(payload)
    response.headers["Location"] = f"books/{created.id}"
    return created


@app.patch("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def update_book(
    book_id: str,
    payload: BookUpdate,
    api_key: str = Depends(verify_api_key),
    service: BookService = Depends(get_book_service)
):
    """
    Update a book.

    Only the fields provided are changed; null fields are ignored.
    """
    return await service.update_one(book_id, payload)


@app.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Books"])
async def delete_book(
    book_id: str,
    api_key: str = Depends(verify_api_key),
    service: BookService = Depends(get_book_service)
):
    """Delete a book."""
    await service.delete_one(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
