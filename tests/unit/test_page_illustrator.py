"""Unit tests for PageIllustrator with a mocked Gemini client."""

from unittest.mock import MagicMock

import pytest

from storybook.core.modules.page_illustrator import ILLUSTRATION_ERROR, PageIllustrator
from storybook.core.types import Character, Illustration, Page

from .conftest import make_chunk, make_part


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def sample_page():
    return Page(
        page_number=3,
        text="Mira found a glowing rock.",
        illustration_prompt="Mira holding a glowing moon rock",
    )


@pytest.fixture
def cast():
    return (Character("Mira", "curious astronaut"),)


def illustrator_with_stream(*chunks):
    client = MagicMock()
    client.models.generate_content_stream.return_value = iter(chunks)
    return PageIllustrator(client=client, model="test-model", config={"modalities": "test"}), client


# =============================================================================
# Tests
# =============================================================================


class TestIllustratePage:
    """Tests for PageIllustrator.illustrate_page()."""

    def test_attaches_image_and_description(self, illustrator, sample_page, cast, png_bytes):
        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.illustration == Illustration(data=png_bytes, mime_type="image/png")
        assert result.image_description == "Here is Mira among the stars."
        assert result.error is None

    def test_keeps_page_identity(self, illustrator, sample_page, cast):
        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.page_number == sample_page.page_number
        assert result.text == sample_page.text
        assert result.illustration_prompt == sample_page.illustration_prompt

    def test_sends_prompt_to_configured_model(self, sample_page, cast):
        illustrator, client = illustrator_with_stream(
            make_chunk(make_part(image=b"img", mime_type="image/png"))
        )

        illustrator.illustrate_page(sample_page, cast, "space")

        kwargs = client.models.generate_content_stream.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["config"] == {"modalities": "test"}
        assert "Mira holding a glowing moon rock" in kwargs["contents"]
        assert "Mira: curious astronaut" in kwargs["contents"]

    def test_first_image_wins(self, sample_page, cast):
        illustrator, _ = illustrator_with_stream(
            make_chunk(make_part(image=b"first", mime_type="image/png")),
            make_chunk(make_part(image=b"second", mime_type="image/jpeg")),
        )

        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.illustration.data == b"first"

    def test_image_only_response_has_no_description(self, sample_page, cast):
        illustrator, _ = illustrator_with_stream(
            make_chunk(make_part(image=b"img", mime_type="image/webp"))
        )

        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.illustration.mime_type == "image/webp"
        assert result.image_description is None

    def test_text_only_response_marks_error(self, sample_page, cast):
        illustrator, _ = illustrator_with_stream(make_chunk(make_part(text="I cannot draw that")))

        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.illustration is None
        assert result.error == ILLUSTRATION_ERROR

    def test_api_error_marks_error_without_raising(self, sample_page, cast):
        client = MagicMock()
        client.models.generate_content_stream.side_effect = RuntimeError("quota exceeded")
        illustrator = PageIllustrator(client=client, model="test-model", config={})

        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.illustration is None
        assert result.error == ILLUSTRATION_ERROR
        assert result.text == sample_page.text

    def test_error_mid_stream_marks_error(self, sample_page, cast):
        def broken_stream():
            yield make_chunk(make_part(text="Starting"))
            raise ConnectionError("stream reset")

        client = MagicMock()
        client.models.generate_content_stream.return_value = broken_stream()
        illustrator = PageIllustrator(client=client, model="test-model", config={})

        result = illustrator.illustrate_page(sample_page, cast, "space")

        assert result.error == ILLUSTRATION_ERROR

    def test_success_clears_previous_error(self, illustrator, sample_page, cast):
        failed = sample_page.with_error(ILLUSTRATION_ERROR)

        result = illustrator.illustrate_page(failed, cast, "space")

        assert result.error is None
        assert result.has_illustration


class TestIllustrateStory:
    """Tests for PageIllustrator.illustrate_story()."""

    def test_yields_pages_in_order(self, illustrator, cast):
        pages = [Page(page_number=n, text=f"page {n}") for n in (1, 2, 3)]

        results = list(illustrator.illustrate_story(pages, cast, "space"))

        assert [p.page_number for p in results] == [1, 2, 3]
        assert all(p.has_illustration for p in results)

    def test_one_request_per_page(self, illustrator, mock_image_client, cast):
        pages = [Page(page_number=n, text=f"page {n}") for n in (1, 2)]

        list(illustrator.illustrate_story(pages, cast, "space"))

        assert mock_image_client.models.generate_content_stream.call_count == 2
