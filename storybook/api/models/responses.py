"""Pydantic models for API responses."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from storybook.core.types import Page, Story
from .requests import CamelModel


class IllustrationResponse(CamelModel):
    """Generated image, base64-encoded."""

    data: str
    mime_type: str


class PageResponse(CamelModel):
    """A single page of the story."""

    page_number: int
    title: Optional[str] = None
    text: str
    illustration_prompt: str = ""
    illustration: Optional[IllustrationResponse] = None
    image_description: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, page: Page) -> "PageResponse":
        illustration = None
        if page.illustration is not None:
            illustration = IllustrationResponse(
                data=page.illustration.to_base64(),
                mime_type=page.illustration.mime_type,
            )
        return cls(
            page_number=page.page_number,
            title=page.title,
            text=page.text,
            illustration_prompt=page.illustration_prompt,
            illustration=illustration,
            image_description=page.image_description,
            error=page.error,
        )


class CharacterResponse(CamelModel):
    name: str
    description: str = ""


class StoryMetadataResponse(CamelModel):
    """Request details stored with the story."""

    theme: str
    characters: list[CharacterResponse]
    moral: Optional[str] = None
    age_group: str
    created_at: datetime


class StoryResponse(CamelModel):
    """Full stored story."""

    id: str
    pages: list[PageResponse]
    metadata: StoryMetadataResponse

    @classmethod
    def from_domain(cls, story: Story) -> "StoryResponse":
        meta = story.metadata
        return cls(
            id=story.id,
            pages=[PageResponse.from_domain(p) for p in story.pages],
            metadata=StoryMetadataResponse(
                theme=meta.theme,
                characters=[
                    CharacterResponse(name=c.name, description=c.description)
                    for c in meta.characters
                ],
                moral=meta.moral,
                age_group=meta.age_group,
                created_at=meta.created_at,
            ),
        )


class RegeneratePageResponse(CamelModel):
    """Result of regenerating one page."""

    success: bool = True
    page: PageResponse


class ThemeResponse(CamelModel):
    value: str
    label: str
    emoji: str


class ThemeListResponse(CamelModel):
    themes: list[ThemeResponse] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: str
    message: str
    timestamp: datetime
