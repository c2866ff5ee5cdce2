"""Unit tests for the story generation pipeline."""

from unittest.mock import MagicMock

import pytest

from storybook.core.errors import StoryGenerationError, StoryValidationError
from storybook.core.events import CompleteEvent, ErrorEvent, PageEvent, StatusEvent
from storybook.core.modules.page_illustrator import ILLUSTRATION_ERROR, PageIllustrator
from storybook.core.programs.story_generator import PipelineState, StoryGenerator
from storybook.core.types import Character, StoryRequest

from .conftest import make_chunk, make_part


class RecordingSink:
    """Collects every event the pipeline sends."""

    def __init__(self):
        self.events = []

    async def send(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def generator(store, illustrator, story_text):
    return StoryGenerator(writer=lambda prompt: story_text, illustrator=illustrator, store=store)


class TestSuccessfulRun:
    """A run where every model call succeeds."""

    @pytest.mark.asyncio
    async def test_event_sequence(self, generator, story_request, sink):
        await generator.run(story_request, sink)

        assert isinstance(sink.events[0], StatusEvent)
        assert isinstance(sink.events[-1], CompleteEvent)
        assert sink.events[-1].story_id == generator.story_id
        pages = sink.of_type(PageEvent)
        assert [e.page_number for e in pages] == list(range(1, 8))
        assert all(e.total_pages == 7 for e in pages)

    @pytest.mark.asyncio
    async def test_status_messages(self, generator, story_request, sink):
        await generator.run(story_request, sink)

        messages = [e.message for e in sink.of_type(StatusEvent)]
        assert messages[0] == "Starting story generation..."
        assert "Illustrating page 1 of 7..." in messages
        assert "Illustrating page 7 of 7..." in messages
        assert messages[-1] == "Saving your story..."

    @pytest.mark.asyncio
    async def test_exactly_one_terminal_event(self, generator, story_request, sink):
        await generator.run(story_request, sink)

        assert sum(1 for e in sink.events if e.is_terminal) == 1

    @pytest.mark.asyncio
    async def test_publishes_story(self, generator, story_request, store, sink):
        story = await generator.run(story_request, sink)

        stored = store.get(generator.story_id)
        assert stored.id == story.id
        assert stored.page_count == 7
        assert stored.title == "Mira and the Moon Map"
        assert stored.metadata.theme == "space"
        assert all(p.has_illustration for p in stored.pages)
        assert generator.state is PipelineState.PUBLISHED
        assert generator.pages_done == generator.pages_total == 7

    @pytest.mark.asyncio
    async def test_page_events_carry_illustrations(self, generator, story_request, sink, png_bytes):
        await generator.run(story_request, sink)

        first = sink.of_type(PageEvent)[0]
        assert first.content.illustration.data == png_bytes
        assert first.content.title == "Mira and the Moon Map"

    @pytest.mark.asyncio
    async def test_runs_without_sink(self, generator, story_request, store):
        story = await generator.run(story_request)

        assert story is not None
        assert generator.story_id in store

    @pytest.mark.asyncio
    async def test_writer_receives_outline_prompt(self, store, illustrator, story_text, story_request):
        prompts = []

        def writer(prompt):
            prompts.append(prompt)
            return story_text

        await StoryGenerator(writer=writer, illustrator=illustrator, store=store).run(story_request)

        assert len(prompts) == 1
        assert "THEME: space" in prompts[0]
        assert "CHARACTERS: Mira (curious astronaut)" in prompts[0]

    @pytest.mark.asyncio
    async def test_unformatted_text_uses_fallback_page_count(self, store, illustrator, story_request, sink):
        prose = "\n".join(f"Line {i}" for i in range(10))
        generator = StoryGenerator(writer=lambda p: prose, illustrator=illustrator, store=store, page_count=5)

        await generator.run(story_request, sink)

        assert len(sink.of_type(PageEvent)) == 5
        assert store.get(generator.story_id).pages[0].title == "Title Page"

    @pytest.mark.asyncio
    async def test_uses_given_story_id(self, store, illustrator, story_text, story_request):
        generator = StoryGenerator(
            writer=lambda p: story_text, illustrator=illustrator, store=store, story_id="fixed-id"
        )

        await generator.run(story_request)

        assert "fixed-id" in store


class TestPageFailures:
    """Illustration failures degrade single pages, not the story."""

    @pytest.mark.asyncio
    async def test_failed_page_is_still_published(self, store, story_text, story_request, sink):
        calls = {"n": 0}

        def stream(**kwargs):
            calls["n"] += 1
            if calls["n"] == 3:
                raise RuntimeError("safety filter")
            return iter([make_chunk(make_part(image=b"img", mime_type="image/png"))])

        client = MagicMock()
        client.models.generate_content_stream.side_effect = stream
        illustrator = PageIllustrator(client=client, model="test-model", config={})
        generator = StoryGenerator(writer=lambda p: story_text, illustrator=illustrator, store=store)

        await generator.run(story_request, sink)

        pages = store.get(generator.story_id).pages
        assert len(pages) == 7
        assert pages[2].illustration is None
        assert pages[2].error == ILLUSTRATION_ERROR
        assert pages[3].has_illustration
        assert isinstance(sink.events[-1], CompleteEvent)
        assert sink.of_type(PageEvent)[2].content.error == ILLUSTRATION_ERROR


class TestFailedRun:
    """Runs that end with an error event and publish nothing."""

    @pytest.mark.asyncio
    async def test_missing_fields_fail_before_any_status(self, generator, store, sink):
        request = StoryRequest(theme="", characters=(), age_group="6-8")

        result = await generator.run(request, sink)

        assert result is None
        assert len(sink.events) == 1
        assert isinstance(sink.events[0], ErrorEvent)
        assert sink.events[0].message == "Missing required fields: theme, characters"
        assert isinstance(generator.error, StoryValidationError)
        assert generator.state is PipelineState.FAILED
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_writer_exception_sends_error_event(self, store, illustrator, story_request, sink):
        def writer(prompt):
            raise ConnectionError("model unavailable")

        generator = StoryGenerator(writer=writer, illustrator=illustrator, store=store)

        result = await generator.run(story_request, sink)

        assert result is None
        assert isinstance(sink.events[-1], ErrorEvent)
        assert "model unavailable" in sink.events[-1].message
        assert not sink.of_type(PageEvent)
        assert isinstance(generator.error, StoryGenerationError)
        assert generator.failed_at is PipelineState.OUTLINE_REQUESTED
        assert generator.story_id not in store

    @pytest.mark.asyncio
    @pytest.mark.parametrize("output", ["", "   \n  ", None])
    async def test_empty_model_output_is_an_error(self, store, illustrator, story_request, sink, output):
        generator = StoryGenerator(writer=lambda p: output, illustrator=illustrator, store=store)

        await generator.run(story_request, sink)

        assert isinstance(sink.events[-1], ErrorEvent)
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_publish_failure_sends_error_event(self, store, illustrator, story_text, story_request, sink):
        first = StoryGenerator(writer=lambda p: story_text, illustrator=illustrator, store=store, story_id="dup")
        await first.run(story_request)
        second = StoryGenerator(writer=lambda p: story_text, illustrator=illustrator, store=store, story_id="dup")

        await second.run(story_request, sink)

        assert isinstance(sink.events[-1], ErrorEvent)
        assert not sink.of_type(CompleteEvent)
        assert second.state is PipelineState.FAILED


class TestRunLifecycle:
    @pytest.mark.asyncio
    async def test_cannot_run_twice(self, generator, story_request):
        await generator.run(story_request)

        with pytest.raises(RuntimeError, match="already ran"):
            await generator.run(story_request)

    @pytest.mark.asyncio
    async def test_broken_sink_does_not_stop_run(self, generator, story_request, store):
        class BrokenSink:
            async def send(self, event):
                raise BrokenPipeError("client gone")

        story = await generator.run(story_request, BrokenSink())

        assert story is not None
        assert generator.story_id in store

    @pytest.mark.asyncio
    async def test_characters_reach_illustration_prompts(self, store, mock_image_client, story_text):
        illustrator = PageIllustrator(client=mock_image_client, model="test-model", config={})
        request = StoryRequest(
            theme="dinosaurs",
            characters=(Character("Rex", "tiny green dinosaur"),),
            age_group="3-5",
        )

        await StoryGenerator(writer=lambda p: story_text, illustrator=illustrator, store=store).run(request)

        for call in mock_image_client.models.generate_content_stream.call_args_list:
            assert "Rex: tiny green dinosaur" in call.kwargs["contents"]
            assert "Theme: dinosaurs" in call.kwargs["contents"]
