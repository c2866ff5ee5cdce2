#!/usr/bin/env python3
"""
CLI for generating an illustrated children's story and saving it as a PDF.

Usage:
    python cli/generate_story.py --theme space --character "Mira:curious astronaut" --age 6-8
    python cli/generate_story.py --theme friendship --character "Pip:a shy hedgehog" \
        --character "Bo:a loud bear" --moral "Everyone has something to offer"
    python cli/generate_story.py --theme dinosaurs --character "Rex" --output rex.pdf --verbose
"""

import argparse
import asyncio
import re
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from storybook.api.logging import configure_logging  # noqa: E402
from storybook.config import get_inference_lm  # noqa: E402
from storybook.core.document import render_story_pdf  # noqa: E402
from storybook.core.events import ErrorEvent, PageEvent, StatusEvent  # noqa: E402
from storybook.core.modules.page_illustrator import PageIllustrator  # noqa: E402
from storybook.core.modules.story_writer import StoryWriter  # noqa: E402
from storybook.core.programs.story_generator import StoryGenerator  # noqa: E402
from storybook.core.story_store import StoryStore  # noqa: E402
from storybook.core.types import Character, StoryRequest  # noqa: E402


class PrintingSink:
    """Prints progress events to stderr."""

    def __init__(self, verbose: bool):
        self.verbose = verbose

    async def send(self, event) -> None:
        if isinstance(event, StatusEvent) and self.verbose:
            print(event.message, file=sys.stderr)
        elif isinstance(event, PageEvent):
            marker = "" if event.content.has_illustration else " (no illustration)"
            print(f"Page {event.page_number}/{event.total_pages} ready{marker}", file=sys.stderr)
        elif isinstance(event, ErrorEvent):
            print(f"Error: {event.message}", file=sys.stderr)


def parse_character(value: str) -> Character:
    """Parse 'Name:description' (description optional)."""
    name, _, description = value.partition(":")
    if not name.strip():
        raise argparse.ArgumentTypeError(f"Character needs a name: {value!r}")
    return Character(name=name.strip(), description=description.strip())


def main():
    parser = argparse.ArgumentParser(
        description="Generate an illustrated children's story and save it as a PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--theme", required=True, help="Story theme, e.g. space or friendship")
    parser.add_argument(
        "--character", "-c",
        dest="characters",
        action="append",
        type=parse_character,
        required=True,
        help="Character as 'Name:description'. Repeat for more characters.",
    )
    parser.add_argument("--age", default="6-8", help="Age group: 3-5, 6-8 or 9-12 (default: 6-8)")
    parser.add_argument("--moral", default=None, help="Lesson the story should teach")
    parser.add_argument("--ideas", default=None, help="Extra ideas to work into the story")
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output PDF path (saved to output/ directory). Auto-generated if not specified.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print progress information")

    args = parser.parse_args()

    configure_logging(json_format=False)

    request = StoryRequest(
        theme=args.theme,
        characters=tuple(args.characters),
        age_group=args.age,
        moral=args.moral,
        custom_ideas=args.ideas,
    )

    store = StoryStore()
    generator = StoryGenerator(
        writer=StoryWriter(lm=get_inference_lm()),
        illustrator=PageIllustrator(),
        store=store,
    )

    story = asyncio.run(generator.run(request, PrintingSink(args.verbose)))
    if story is None:
        sys.exit(1)

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        output_dir = Path(__file__).parent.parent / "output"
        slug = re.sub(r"[^a-z0-9]+", "_", (story.title or args.theme).lower())[:30].strip("_")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = output_dir / f"{slug}_{timestamp}.pdf"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_story_pdf(story))
    print(f"Story saved to: {output_path}")

    if args.verbose:
        print("\n--- Generation Summary ---")
        print(f"Story ID: {story.id}")
        print(f"Title: {story.title}")
        print(f"Pages: {story.page_count}")
        failed = [p.page_number for p in story.pages if p.error]
        if failed:
            print(f"Pages without illustration: {failed}")


if __name__ == "__main__":
    main()
