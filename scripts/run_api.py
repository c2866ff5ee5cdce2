#!/usr/bin/env python3
"""Run the FastAPI server for the picture book generator."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn  # noqa: E402

from storybook.api.config import HOST, PORT  # noqa: E402


def main():
    """Run the API server."""
    uvicorn.run(
        "storybook.api.main:app",
        host=HOST,
        port=PORT,
        reload=True,  # Enable auto-reload for development
    )


if __name__ == "__main__":
    main()
