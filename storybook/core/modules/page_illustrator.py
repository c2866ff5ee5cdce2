"""
Module for generating page illustrations with Gemini.

Each page gets one streamed image request asking for image and text output.
The first inline image in the stream becomes the page illustration and any
text parts become the image description. A failed page is returned with an
error marker instead of raising, so the rest of the story keeps going.
"""

import logging
from typing import Iterator, Optional, Sequence

from storybook.config import (
    get_image_client,
    get_image_model,
    get_image_config,
    extract_image_from_chunk,
    extract_text_from_chunk,
)
from ..prompts import build_illustration_prompt
from ..types import Character, Illustration, Page

logger = logging.getLogger(__name__)

ILLUSTRATION_ERROR = "Failed to generate illustration"


class IllustrationFailed(Exception):
    """The model returned no image for a page."""


class PageIllustrator:
    """
    Generate illustrations for story pages with Gemini.

    Pages are illustrated one at a time; there is never more than one
    request in flight for a story.
    """

    def __init__(self, client=None, model: Optional[str] = None, config=None):
        self.client = client or get_image_client()
        self.model = model or get_image_model()
        self.config = config if config is not None else get_image_config()

    def _generate_image(self, prompt: str) -> tuple[Illustration, str]:
        """Stream one image request and collect the first image plus commentary."""
        response = self.client.models.generate_content_stream(
            model=self.model,
            contents=prompt,
            config=self.config,
        )

        illustration = None
        commentary = []
        for chunk in response:
            if illustration is None:
                image = extract_image_from_chunk(chunk)
                if image:
                    data, mime_type = image
                    illustration = Illustration(data=data, mime_type=mime_type)
            text = extract_text_from_chunk(chunk)
            if text:
                commentary.append(text)

        if illustration is None:
            raise IllustrationFailed("No image found in response")

        return illustration, "".join(commentary).strip()

    def illustrate_page(
        self,
        page: Page,
        characters: Sequence[Character],
        theme: str,
    ) -> Page:
        """
        Illustrate a single page.

        Args:
            page: The story page to illustrate
            characters: The story's cast, described in every prompt
            theme: Story theme

        Returns:
            Copy of the page with an illustration, or with illustration=None
            and the error marker set if generation failed
        """
        prompt = build_illustration_prompt(page, characters, theme)
        logger.debug(f"Page {page.page_number}: prompt length {len(prompt)} chars")

        try:
            illustration, description = self._generate_image(prompt)
        except Exception as e:
            logger.warning(
                f"Illustration failed for page {page.page_number}: {e}",
                extra={"page_number": page.page_number, "error_type": type(e).__name__},
            )
            return page.with_error(ILLUSTRATION_ERROR)

        logger.info(
            f"Page {page.page_number}: generated {len(illustration.data)} bytes",
            extra={"page_number": page.page_number},
        )
        return page.with_illustration(illustration, description)

    def illustrate_story(
        self,
        pages: Sequence[Page],
        characters: Sequence[Character],
        theme: str,
    ) -> Iterator[Page]:
        """Illustrate pages in order, yielding each one as soon as it is done."""
        for page in pages:
            yield self.illustrate_page(page, characters, theme)
