"""
Catalog error types.

The HTTP layer maps these onto status codes; the catalog itself never
catches them.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""

    def __init__(self, message: str = "Catalog error"):
        self.message = message
        super().__init__(message)


class ResourceNotFoundError(CatalogError):
    """Raised when a book id does not exist."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class NoMatchError(ResourceNotFoundError):
    """Raised when a page or search query matches no items at all."""

    def __init__(self, message: str = "No resources found"):
        super().__init__(message)


class DuplicateBookError(CatalogError):
    """Raised when author, name, genre and edition collide with another book."""

    def __init__(self, message: str = "Book already exists", key: dict = None):
        self.key = key or {}
        super().__init__(message)
