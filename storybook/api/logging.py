"""Structured logging infrastructure for the API layer.

Provides JSON-formatted logging for production and human-readable
logging for development, plus a StoryLogger helper for story generation events.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Extra record attributes copied into JSON log lines when present
STRUCTURED_FIELDS = ("story_id", "stage", "duration", "page_number", "page_count", "theme", "error_type")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        for name in STRUCTURED_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create console handler
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


class StoryLogger:
    """Story lifecycle events: one line per run start, delivered page, regeneration and outcome."""

    def __init__(self):
        self.logger = logging.getLogger("story_generation")

    def generation_started(self, story_id: str, theme: str) -> None:
        self.logger.info(
            "Story generation started",
            extra={"story_id": story_id, "stage": "started", "theme": theme},
        )

    def page_delivered(self, story_id: str, page_number: int, has_illustration: bool) -> None:
        level = logging.INFO if has_illustration else logging.WARNING
        message = "Page delivered" if has_illustration else "Page delivered without illustration"
        self.logger.log(
            level,
            message,
            extra={"story_id": story_id, "stage": "illustrating", "page_number": page_number},
        )

    def page_regenerated(self, story_id: str, page_number: int, has_illustration: bool, duration: float) -> None:
        level = logging.INFO if has_illustration else logging.WARNING
        outcome = "regenerated" if has_illustration else "regenerated without illustration"
        self.logger.log(
            level,
            f"Page {page_number} {outcome}",
            extra={
                "story_id": story_id,
                "stage": "regeneration",
                "page_number": page_number,
                "duration": round(duration, 2),
            },
        )

    def generation_completed(self, story_id: str, page_count: int, duration: float) -> None:
        self.logger.info(
            f"Story generation completed with {page_count} pages",
            extra={
                "story_id": story_id,
                "stage": "published",
                "page_count": page_count,
                "duration": round(duration, 2),
            },
        )

    def generation_failed(self, story_id: str, error: Exception, stage: str) -> None:
        # The traceback was logged where the error was raised
        self.logger.error(
            f"Story generation failed at {stage}: {error}",
            extra={"story_id": story_id, "stage": stage, "error_type": type(error).__name__},
        )


story_logger = StoryLogger()
