"""Shared fixtures for unit tests.

No test talks to a real model: the Gemini client is replaced by a fake that
streams canned chunks, and the story writer by a function returning canned text.
"""

import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from storybook.api.dependencies import get_story_service
from storybook.api.main import app
from storybook.api.services.story_service import StoryService
from storybook.core.modules.page_illustrator import PageIllustrator
from storybook.core.story_store import StoryStore
from storybook.core.types import Character, StoryRequest


def make_png(width: int = 40, height: int = 30, color: str = "skyblue") -> bytes:
    """Small real PNG for tests that decode images."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_part(image: bytes = None, mime_type: str = None, text: str = None):
    """Fake response part: inline image or text."""
    inline_data = SimpleNamespace(data=image, mime_type=mime_type) if image is not None else None
    return SimpleNamespace(inline_data=inline_data, text=text)


def make_chunk(*parts):
    """Fake streamed chunk whose first candidate holds the given parts."""
    content = SimpleNamespace(parts=list(parts))
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


def build_story_text(page_count: int = 7) -> str:
    """Model output in the tagged page format."""
    blocks = [
        "[PAGE 1 - TITLE]\n"
        "Title: Mira and the Moon Map\n"
        "Text: A story about a curious astronaut.\n"
        "Illustration: Mira floating beside her rocket under a starry sky"
    ]
    for number in range(2, page_count + 1):
        blocks.append(
            f"[PAGE {number}]\n"
            f"Text: Mira explored crater number {number}.\n"
            f"Illustration: Mira peeking into crater {number}"
        )
    return "\n\n".join(blocks)


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def story_request():
    return StoryRequest(
        theme="space",
        characters=(Character(name="Mira", description="curious astronaut"),),
        age_group="6-8",
    )


@pytest.fixture
def story_text():
    return build_story_text()


@pytest.fixture
def mock_image_client(png_bytes):
    """Gemini client whose stream yields commentary, then an image."""
    client = MagicMock()
    client.models.generate_content_stream.side_effect = lambda **kwargs: iter([
        make_chunk(make_part(text="Here is Mira ")),
        make_chunk(make_part(image=png_bytes, mime_type="image/png")),
        make_chunk(make_part(text="among the stars.")),
    ])
    return client


@pytest.fixture
def illustrator(mock_image_client):
    """PageIllustrator wired to the fake client."""
    return PageIllustrator(client=mock_image_client, model="test-model", config={})


@pytest.fixture
def store():
    return StoryStore()


@pytest.fixture
def service(store, illustrator, story_text):
    return StoryService(store, writer=lambda prompt: story_text, illustrator=illustrator)


@pytest.fixture
def client(service):
    """TestClient with the service bound to a fresh store and fake models."""
    app.dependency_overrides[get_story_service] = lambda: service

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
