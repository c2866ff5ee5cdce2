"""
Render a stored story into a printable PDF.

Each page becomes one PDF sheet (more if its text overflows): optional title, optional illustration scaled
into a fixed box, body text and a page-number footer. A closing colophon page
records the theme and generation date. A page whose image cannot be decoded
is rendered without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence, Union
from xml.sax.saxutils import escape

from PIL import Image
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Frame, Paragraph

from .types import Illustration, Story

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_TITLE = "Children's Story"
DOCUMENT_AUTHOR = "AI Story Generator"


@dataclass(frozen=True)
class PageBlock:
    """Everything that goes on one rendered story page."""

    page_number: int
    text: str
    footer: str
    title: Optional[str] = None
    image: Optional[Illustration] = None


@dataclass(frozen=True)
class ColophonBlock:
    """Closing page with generation details."""

    lines: tuple[str, ...]


DocumentBlock = Union[PageBlock, ColophonBlock]


def story_to_blocks(story: Story, generated_on: Optional[datetime] = None) -> list[DocumentBlock]:
    """Map a story onto document blocks: one per page, then the colophon."""
    generated_on = generated_on or datetime.now()
    blocks: list[DocumentBlock] = [
        PageBlock(
            page_number=page.page_number,
            title=page.title or None,
            image=page.illustration,
            text=page.text,
            footer=f"Page {page.page_number}",
        )
        for page in story.pages
    ]
    blocks.append(
        ColophonBlock(
            lines=(
                f"Created with {DOCUMENT_AUTHOR}",
                f"Generated on: {generated_on.strftime('%B %d, %Y').replace(' 0', ' ')}",
                f"Theme: {story.metadata.theme}",
            )
        )
    )
    return blocks


class StoryPDFRenderer:
    """
    Render document blocks onto A4 pages with reportlab.

    Args:
        page_size: (width, height) in points
        margin: Page margin in points
        image_box: (max_width, max_height) the illustration is scaled to fit
    """

    def __init__(
        self,
        *,
        page_size: tuple[float, float] = A4,
        margin: float = 50,
        image_box: tuple[float, float] = (400, 300),
    ) -> None:
        self.page_size = page_size
        self.margin = margin
        self.image_box = image_box

        self.title_style = ParagraphStyle(
            name="PageTitle",
            fontName="Helvetica-Bold",
            fontSize=20,
            leading=24,
            alignment=TA_CENTER,
            spaceAfter=14,
        )
        self.body_style = ParagraphStyle(
            name="Body",
            fontName="Helvetica",
            fontSize=12,
            leading=17,  # 12pt text with 5pt line gap
            alignment=TA_JUSTIFY,
        )
        self.footer_style = ParagraphStyle(
            name="Footer",
            fontName="Helvetica",
            fontSize=10,
            leading=12,
            alignment=TA_CENTER,
        )
        self.colophon_style = ParagraphStyle(
            name="Colophon",
            fontName="Helvetica-Oblique",
            fontSize=10,
            leading=14,
            alignment=TA_CENTER,
        )

    def render(self, blocks: Sequence[DocumentBlock], *, title: str, keywords: str = "") -> bytes:
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.page_size)
        pdf.setTitle(title)
        pdf.setAuthor(DOCUMENT_AUTHOR)
        pdf.setSubject(DEFAULT_DOCUMENT_TITLE)
        pdf.setKeywords(keywords)

        for block in blocks:
            if isinstance(block, PageBlock):
                self._draw_page(pdf, block)
            else:
                self._draw_colophon(pdf, block)

        pdf.save()
        return buffer.getvalue()

    # ------------------------------------------------------------------ pages

    def _draw_page(self, pdf: canvas.Canvas, block: PageBlock) -> None:
        width, height = self.page_size
        cursor = height - self.margin
        content_width = width - 2 * self.margin

        if block.title:
            cursor = self._draw_paragraph(pdf, Paragraph(escape(block.title), self.title_style), cursor)

        if block.image is not None:
            reader = self._load_image(block.image, block.page_number)
            if reader is not None:
                img_width, img_height = reader.getSize()
                box_width, box_height = self.image_box
                scale = min(box_width / img_width, box_height / img_height)
                draw_width = img_width * scale
                draw_height = img_height * scale
                x = self.margin + (content_width - draw_width) / 2
                cursor -= draw_height
                pdf.drawImage(reader, x, cursor, draw_width, draw_height, preserveAspectRatio=True, mask="auto")
                cursor -= 14

        body = escape(block.text).replace("\n", "<br/>")
        flowables = [Paragraph(body, self.body_style)]
        available = max(cursor - self.margin - 20, 0)
        continuation = False
        while True:
            frame = Frame(self.margin, self.margin + 20, content_width, available, showBoundary=0)
            flowables, progressed = self._fill_frame(pdf, frame, flowables)
            self._draw_footer(pdf, block.footer)
            pdf.showPage()
            if not flowables:
                break
            if continuation and not progressed:
                logger.warning(
                    f"Page {block.page_number}: text does not fit on a sheet, truncating",
                    extra={"page_number": block.page_number},
                )
                break
            # Overflowing text continues on a fresh sheet under the same footer
            continuation = True
            available = height - 2 * self.margin - 20

    def _draw_colophon(self, pdf: canvas.Canvas, block: ColophonBlock) -> None:
        width, height = self.page_size
        frame = Frame(
            self.margin,
            self.margin,
            width - 2 * self.margin,
            height - 2 * self.margin,
            showBoundary=0,
        )
        frame.addFromList([Paragraph(escape(line), self.colophon_style) for line in block.lines], pdf)
        pdf.showPage()

    # ------------------------------------------------------------------ helpers

    def _draw_paragraph(self, pdf: canvas.Canvas, paragraph: Paragraph, cursor: float) -> float:
        """Draw a paragraph with its top at cursor and return the new cursor."""
        width = self.page_size[0] - 2 * self.margin
        _, para_height = paragraph.wrap(width, cursor)
        paragraph.drawOn(pdf, self.margin, cursor - para_height)
        return cursor - para_height - paragraph.style.spaceAfter

    @staticmethod
    def _fill_frame(pdf: canvas.Canvas, frame: Frame, flowables: list) -> tuple[list, bool]:
        """Draw what fits in the frame. Returns the leftover flowables and whether anything was drawn."""
        count = len(flowables)
        frame.addFromList(flowables, pdf)
        progressed = len(flowables) < count
        if flowables:
            pieces = frame.split(flowables[0], pdf)
            if len(pieces) > 1 and frame.add(pieces[0], pdf):
                return pieces[1:] + flowables[1:], True
        return flowables, progressed

    def _draw_footer(self, pdf: canvas.Canvas, text: str) -> None:
        width, _ = self.page_size
        footer_frame = Frame(
            self.margin,
            self.margin - 20,
            width - 2 * self.margin,
            30,
            showBoundary=0,
        )
        footer_frame.addFromList([Paragraph(escape(text), self.footer_style)], pdf)

    @staticmethod
    def _load_image(illustration: Illustration, page_number: int) -> Optional[ImageReader]:
        try:
            image = Image.open(BytesIO(illustration.data))
            image.load()
        except Exception as e:
            logger.warning(
                f"Skipping unreadable illustration on page {page_number}: {e}",
                extra={"page_number": page_number, "error_type": type(e).__name__},
            )
            return None
        return ImageReader(image)


def render_story_pdf(story: Story, renderer: Optional[StoryPDFRenderer] = None) -> bytes:
    """Render a story to PDF bytes. Does not modify the story."""
    renderer = renderer or StoryPDFRenderer()
    first_title = story.pages[0].title if story.pages and story.pages[0].title else None
    return renderer.render(
        story_to_blocks(story),
        title=first_title or DEFAULT_DOCUMENT_TITLE,
        keywords=story.metadata.theme,
    )
