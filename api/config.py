"""
API configuration settings.
"""

from typing import Optional

from pydantic import validator
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Bookstore Catalog API"
    api_version: str = "1.0.0"
    api_description: str = "Paginated, searchable REST API for a book catalog"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Storage Settings
    storage_backend: str = "mongodb"  # mongodb or memory
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "bookstore"
    mongodb_collection: str = "books"

    # API Key Settings
    api_keys: str = ""  # Comma-separated list of valid API keys

    # Pagination
    default_page_size: int = 5
    max_page_size: int = 30

    # CORS Settings
    cors_origins: list = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    @validator('storage_backend')
    def validate_storage_backend(cls, v):
        """Ensure storage backend is known."""
        valid_backends = ['mongodb', 'memory']
        if v.lower() not in valid_backends:
            raise ValueError(f'storage_backend must be one of: {valid_backends}')
        return v.lower()

    @validator('log_level')
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @validator('log_format')
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_api_keys(self) -> list:
        """Parse the comma-separated API key list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }


# Global config instance
config = APIConfig()
