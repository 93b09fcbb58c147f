"""
FastAPI RESTful API for the Bookstore Catalog.

This module provides a REST API for:
- Paginated book browsing ordered by name
- Book search by title, author, genre and edition
- Creating, updating and deleting books
- API key-based authorization for write operations
"""
