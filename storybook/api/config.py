"""API configuration constants.

Single source of truth for settings used across the API layer.
"""

import logging
import os

from dotenv import find_dotenv, load_dotenv

# Load .env from project root (find_dotenv searches parent directories)
load_dotenv(find_dotenv())

# Routing
API_PREFIX = "/api"
STORY_ROUTE_PREFIX = f"{API_PREFIX}/story"

# Dev server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# Logging
LOG_JSON = os.getenv("STORYBOOK_LOG_JSON", "true").lower() not in ("0", "false", "no")
LOG_LEVEL = getattr(logging, os.getenv("STORYBOOK_LOG_LEVEL", "INFO").upper(), logging.INFO)

# CORS - the reader UI may be served from anywhere
CORS_ORIGINS = ["*"]

# Media type for the progressive delivery stream
NDJSON_MEDIA_TYPE = "application/x-ndjson"
SSE_MEDIA_TYPE = "text/event-stream"
