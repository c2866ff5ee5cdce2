"""Built-in story themes offered to the reader."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Theme:
    value: str
    label: str
    emoji: str


THEMES = (
    Theme("adventure", "Adventure", "🗺️"),
    Theme("friendship", "Friendship", "🤝"),
    Theme("magic", "Magic & Fantasy", "✨"),
    Theme("animals", "Animals", "🦁"),
    Theme("space", "Space", "🚀"),
    Theme("underwater", "Underwater", "🐠"),
    Theme("dinosaurs", "Dinosaurs", "🦕"),
    Theme("fairy-tale", "Fairy Tale", "🏰"),
    Theme("superhero", "Superhero", "🦸"),
    Theme("nature", "Nature", "🌳"),
)


def list_themes() -> list[dict]:
    return [asdict(theme) for theme in THEMES]
