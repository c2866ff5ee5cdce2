"""Story endpoints: generate, fetch, regenerate a page, export."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import Response, StreamingResponse

from storybook.core.errors import StoryNotFoundError, StoryValidationError
from storybook.core.themes import list_themes
from ..config import NDJSON_MEDIA_TYPE, SSE_MEDIA_TYPE
from ..dependencies import Service
from ..models.requests import ExportPdfRequest, GenerateStoryRequest, RegeneratePageRequest
from ..models.responses import (
    PageResponse,
    RegeneratePageResponse,
    StoryResponse,
    ThemeListResponse,
)
from ..services.story_generation import stream_events

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(error: StoryNotFoundError) -> HTTPException:
    logger.info(f"{error} for story {error.story_id}", extra={"story_id": error.story_id})
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.get(
    "/themes",
    response_model=ThemeListResponse,
    summary="List story themes",
)
async def get_themes():
    """Themes offered in the story form."""
    return {"themes": list_themes()}


@router.post(
    "/generate",
    summary="Generate a story",
    description=(
        "Stream progress while a story is written and illustrated. One JSON event per line "
        "(status, page, then complete or error). Send `Accept: text/event-stream` for SSE framing."
    ),
    responses={
        200: {"content": {NDJSON_MEDIA_TYPE: {}, SSE_MEDIA_TYPE: {}}},
        400: {"description": "Missing required fields"},
        500: {"description": "Model clients could not be created"},
    },
)
async def generate_story(body: GenerateStoryRequest, request: Request, service: Service):
    """Start a generation run and stream its events."""
    try:
        story_id, channel = service.start_story(body.to_domain())
    except StoryValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        # Model clients are built on first use; missing credentials surface here
        logger.error(f"Could not start story generation: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    sse = SSE_MEDIA_TYPE in request.headers.get("accept", "")
    return StreamingResponse(
        stream_events(channel, sse=sse),
        media_type=SSE_MEDIA_TYPE if sse else NDJSON_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache", "X-Story-Id": story_id},
    )


@router.get(
    "/story/{story_id}",
    response_model=StoryResponse,
    summary="Get a story",
)
async def get_story(story_id: str, service: Service):
    """Get a published story by ID."""
    try:
        story = service.get_story(story_id)
    except StoryNotFoundError as e:
        raise _not_found(e)

    return StoryResponse.from_domain(story)


@router.get(
    "/story/{story_id}/pages/{page_number}/image",
    summary="Get page illustration",
    responses={
        200: {"content": {"image/png": {}}},
        404: {"description": "Image not found"},
    },
)
async def get_page_image(story_id: str, page_number: int, service: Service):
    """Raw illustration bytes for one page."""
    try:
        page = service.get_page(story_id, page_number)
    except StoryNotFoundError as e:
        raise _not_found(e)

    if page.illustration is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Image for page {page_number} not found",
        )

    return Response(content=page.illustration.data, media_type=page.illustration.mime_type)


@router.post(
    "/regenerate-page",
    response_model=RegeneratePageResponse,
    summary="Regenerate a page illustration",
)
async def regenerate_page(body: RegeneratePageRequest, service: Service):
    """Re-illustrate one page in place and return it."""
    try:
        page = await service.regenerate_page(body.story_id, body.page_number)
    except StoryNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        logger.error(f"Page regeneration error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return RegeneratePageResponse(page=PageResponse.from_domain(page))


@router.post(
    "/generate-pdf",
    summary="Export a story as PDF",
    responses={
        200: {"content": {"application/pdf": {}}},
        404: {"description": "Story not found"},
    },
)
async def generate_pdf(body: ExportPdfRequest, service: Service):
    """Render the stored story to a downloadable PDF."""
    try:
        pdf_bytes = await service.export_pdf(body.story_id)
    except StoryNotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        logger.error(f"PDF generation error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="story-{body.story_id}.pdf"'},
    )
