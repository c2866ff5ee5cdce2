"""Pydantic models for API requests and responses."""

from .requests import (
    CharacterInput,
    GenerateStoryRequest,
    RegeneratePageRequest,
    ExportPdfRequest,
)
from .responses import (
    IllustrationResponse,
    PageResponse,
    StoryMetadataResponse,
    StoryResponse,
    RegeneratePageResponse,
    ThemeResponse,
    ThemeListResponse,
    HealthResponse,
)

__all__ = [
    "CharacterInput",
    "GenerateStoryRequest",
    "RegeneratePageRequest",
    "ExportPdfRequest",
    "IllustrationResponse",
    "PageResponse",
    "StoryMetadataResponse",
    "StoryResponse",
    "RegeneratePageResponse",
    "ThemeResponse",
    "ThemeListResponse",
    "HealthResponse",
]
