"""FastAPI application for the picture book generator."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import API_PREFIX, CORS_ORIGINS, LOG_JSON, LOG_LEVEL, STORY_ROUTE_PREFIX
from .logging import configure_logging
from .models.responses import HealthResponse
from .routes import stories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    configure_logging(json_format=LOG_JSON, level=LOG_LEVEL)
    logger.info("Children's Story Generator API started")

    yield

    logger.info("Children's Story Generator API stopped")


app = FastAPI(
    title="Children's Story Generator API",
    description="""
Turn a theme, a cast of characters and an age group into an illustrated picture book.

## Workflow
1. POST `/api/story/generate` and read the event stream (status, page, complete/error)
2. GET `/api/story/story/{id}` with the `storyId` from the `complete` event
3. POST `/api/story/regenerate-page` to redraw a single page
4. POST `/api/story/generate-pdf` to download the book
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(stories.router, prefix=STORY_ROUTE_PREFIX, tags=["Stories"])


@app.get(f"{API_PREFIX}/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        message="Children's Story Generator API is running",
        timestamp=datetime.now(timezone.utc),
    )
