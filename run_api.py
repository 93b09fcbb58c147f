#!/usr/bin/env python3
"""
Script to run the Bookstore Catalog API server.

Usage:
    python run_api.py                 Start the server
    python run_api.py generate-key    Print a new API key for API_KEYS
"""

import sys
from pathlib import Path

import uvicorn

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from api.auth import generate_api_key
from api.config import config

USAGE = "Usage: python run_api.py [serve|generate-key]"


def serve():
    """Run the API server."""
    print("Starting Bookstore Catalog API Server")
    print(f"Host: {config.host}")
    print(f"Port: {config.port}")
    print(f"Debug: {config.debug}")
    print(f"Storage: {config.storage_backend}")
    if config.storage_backend == "mongodb":
        print(f"Database: {config.mongodb_database}")
    print("=" * 50)

    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=True
    )


def main():
    """Main function."""
    if len(sys.argv) > 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1].lower() if len(sys.argv) == 2 else "serve"

    if command == "serve":
        serve()
    elif command == "generate-key":
        print(generate_api_key())
    else:
        print(f"Unknown command: {command}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
