"""
Book catalog core.

This package provides:
- Page filters and paginated results
- Predicate building from sparse search criteria
- In-memory and MongoDB collection sources
- Book storage repositories
"""

from .exceptions import CatalogError, DuplicateBookError, NoMatchError, ResourceNotFoundError
from .filters import BOOK_FILTER_RULES, MatchKind, Predicate, build_predicate
from .pagination import PageFilter, PageResult, Paginator

__version__ = "1.0.0"

__all__ = [
    "BOOK_FILTER_RULES",
    "CatalogError",
    "DuplicateBookError",
    "MatchKind",
    "NoMatchError",
    "PageFilter",
    "PageResult",
    "Paginator",
    "Predicate",
    "ResourceNotFoundError",
    "build_predicate",
]
