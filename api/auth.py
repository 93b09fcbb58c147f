"""
API key authentication for write operations.
"""

import secrets

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.config import config

logger = structlog.get_logger(__name__)

# Security scheme
security = HTTPBearer()


def generate_api_key() -> str:
    """Generate a new API key."""
    return f"bk_{secrets.token_urlsafe(32)}"


def is_valid_api_key(api_key: str) -> bool:
    """Check an API key against the configured list."""
    return any(secrets.compare_digest(api_key, valid) for valid in config.get_api_keys())


async def verify_api_key(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """
    Verify API key from request.

    Args:
        credentials: HTTP authorization credentials

    Returns:
        API key if valid

    Raises:
        HTTPException: If API key is invalid
    """
    api_key = credentials.credentials

    if not is_valid_api_key(api_key):
        logger.warning("Invalid API key attempted", api_key=api_key[:10] + "...")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return api_key
