"""Structured logging for a release notifier run.

A run is a single CI job, so the log is the only record of what happened
to the release: which tag was published, which model summarized it, and
whether the body update and the Slack post went through. The workflow
emits one snake_case event per step:

  workflow_started -> release_created -> release_notes_summarized
  -> release_notes_updated -> release_announced -> workflow_complete

and `release_update_failed` / `slack_notification_failed` (with the
traceback) when a guarded step fails. Those two events are the only trace
of such a failure, because the process still exits 0.

Output goes to stderr so that stdout stays free for anything a CI step
wants to capture. In production (ENVIRONMENT=production) each event is a
JSON line a log collector can parse:
  {"event": "release_created", "repo": "myorg/app", "tag": "v1.2.3", ...}
Otherwise events are rendered for reading in a CI console.

Usage:
    from release_notifier.logging_config import setup_logging, get_logger

    setup_logging(environment="production")
    logger = get_logger(__name__)
    logger.info("release_created", repo="myorg/app", tag="v1.2.3")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def setup_logging(
    environment: str | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structured logging for the application.

    In development: Pretty-printed, colorized output for readability.
    In production: JSON output for log ingestion.

    Args:
        environment: "development" or "production". Reads from
                     ENVIRONMENT env var if not provided.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Reads from LOG_LEVEL env var if not provided.
    """
    env = environment or os.environ.get("ENVIRONMENT", "development")
    level_name = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx and openai log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A structlog bound logger
    """
    return structlog.get_logger(name)
