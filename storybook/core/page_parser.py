"""
Parse generated story text into pages.

Two passes over the model output:
1. Segment: split on [PAGE n] / [PAGE n - label] delimiters. Everything up to
   the next delimiter (or the end of the text) belongs to that page.
2. Extract: read the labeled fields from each segment. Illustration: starts
   at its first occurrence and runs to the end of the segment. Before it,
   Title: and Text: count as labels only at the start of a line, so prose
   such as "the book's title: ..." stays inside the text.

If the model ignored the format and no delimiter is found, the text is split
into a fixed number of pages line by line. parse_pages never raises and never
returns an empty list.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from storybook.config import STORY_CONSTANTS
from .types import Page

logger = logging.getLogger(__name__)

PAGE_DELIMITER = re.compile(r"\[PAGE\s+(\d+)(?:\s*-\s*([^\]]*))?\]", re.IGNORECASE)

FIELD_LABEL = re.compile(r"^[ \t]*(title|text)[ \t]*:", re.IGNORECASE | re.MULTILINE)

ILLUSTRATION_LABEL = re.compile(r"(?:^|(?<=\s))illustration\s*:", re.IGNORECASE)

FALLBACK_ILLUSTRATION_PREFIX = "Illustration for: "


@dataclass(frozen=True)
class PageSegment:
    """Raw text belonging to one [PAGE n] delimiter."""

    page_number: int
    label: str
    body: str


def segment_pages(raw_text: str) -> list[PageSegment]:
    """Split raw text on page delimiters, in input order."""
    matches = list(PAGE_DELIMITER.finditer(raw_text or ""))
    segments = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(raw_text)
        segments.append(
            PageSegment(
                page_number=int(match.group(1)),
                label=(match.group(2) or "").strip(),
                body=raw_text[match.end():end],
            )
        )
    return segments


def extract_fields(body: str) -> dict[str, str]:
    """
    Read labeled fields from one page segment.

    Returns a dict with lowercase keys ("title", "text", "illustration") for
    each label present, plus "unlabeled" for any text before the first label.
    The first occurrence of a label wins.
    """
    illustration = ILLUSTRATION_LABEL.search(body)
    head = body[: illustration.start()] if illustration else body

    labels = list(FIELD_LABEL.finditer(head))
    fields = {"unlabeled": head[: labels[0].start()] if labels else head}

    for i, match in enumerate(labels):
        name = match.group(1).lower()
        end = labels[i + 1].start() if i + 1 < len(labels) else len(head)
        if name not in fields:
            fields[name] = head[match.end():end]

    if illustration:
        fields["illustration"] = body[illustration.end():]

    return {name: value.strip() for name, value in fields.items()}


def _page_from_segment(segment: PageSegment) -> Page:
    fields = extract_fields(segment.body)

    text = fields.get("text") or fields["unlabeled"]
    if not text:
        text = _placeholder_text(segment.page_number)

    title = fields.get("title") or segment.label or None

    return Page(
        page_number=segment.page_number,
        title=title,
        text=text,
        illustration_prompt=fields.get("illustration", ""),
    )


def _placeholder_text(page_number: int) -> str:
    return f"Page {page_number} content"


def fallback_pages(raw_text: str, page_count: int) -> list[Page]:
    """
    Split unformatted text into page_count pages, line by line.

    Lines are shared out as evenly as possible. When there are fewer lines
    than pages, the pages without a line get placeholder text.
    """
    lines = [line.strip() for line in (raw_text or "").splitlines() if line.strip()]
    total = len(lines)
    snippet_length = STORY_CONSTANTS["snippet_length"]

    pages = []
    for i in range(page_count):
        page_number = i + 1
        chunk = lines[i * total // page_count:(i + 1) * total // page_count]
        text = " ".join(chunk) or _placeholder_text(page_number)
        pages.append(
            Page(
                page_number=page_number,
                title="Title Page" if page_number == 1 else f"Page {page_number}",
                text=text,
                illustration_prompt=f"{FALLBACK_ILLUSTRATION_PREFIX}{text[:snippet_length]}",
            )
        )
    return pages


def parse_pages(raw_text: str, page_count: Optional[int] = None) -> list[Page]:
    """
    Convert generated story text into pages ordered by page number.

    Args:
        raw_text: Unstructured model output
        page_count: Number of pages to produce if the output has no delimiters

    Returns:
        Non-empty list of pages. Duplicate page numbers keep the first block;
        [PAGE 0] blocks are ignored.
    """
    page_count = page_count or STORY_CONSTANTS["target_page_count"]

    pages: dict[int, Page] = {}
    for segment in segment_pages(raw_text):
        if segment.page_number < 1:
            logger.warning("Ignoring page block with number 0")
            continue
        if segment.page_number in pages:
            logger.warning(f"Ignoring duplicate block for page {segment.page_number}")
            continue
        pages[segment.page_number] = _page_from_segment(segment)

    if not pages:
        logger.warning(f"No [PAGE n] blocks found, splitting text into {page_count} pages")
        return fallback_pages(raw_text, page_count)

    return [pages[number] for number in sorted(pages)]
