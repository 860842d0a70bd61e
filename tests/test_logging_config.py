"""Tests for logging setup.

A failed release update or Slack post only shows up in the log, so these
tests check that such failures reach stderr and that production logs are
JSON lines.

sys.stdout and sys.stderr are swapped for StringIO buffers before
setup_logging() runs, because structlog binds the stream when it is
configured.

Run with: pytest tests/test_logging_config.py -v
"""

from __future__ import annotations

import io
import json
import sys
from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
import structlog

from release_notifier.config import NotifierConfig, Settings
from release_notifier.llm import LLMClient
from release_notifier.logging_config import get_logger, setup_logging
from release_notifier.schemas import Release
from release_notifier.slack import SlackNotifier
from release_notifier.workflow import ReleaseNotesWorkflow

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def streams(monkeypatch: pytest.MonkeyPatch) -> Iterator[tuple[io.StringIO, io.StringIO]]:
    """Replace stdout/stderr with buffers; yields (out, err)."""
    out, err = io.StringIO(), io.StringIO()
    monkeypatch.setattr(sys, "stdout", out)
    monkeypatch.setattr(sys, "stderr", err)
    yield out, err
    structlog.reset_defaults()


@pytest.fixture
def failing_update_workflow() -> ReleaseNotesWorkflow:
    settings = Settings(
        github_token="ghp_test",
        github_repository="myorg/app",
        release_tag="v1.2.3",
        openai_api_key="sk-test",
        slack_webhook_url="https://hooks.slack.com/services/T/B/X",
    )
    github = AsyncMock()
    github.create_release.return_value = Release(
        id=101,
        tag_name="v1.2.3",
        body="fix: crash on startup",
        html_url="https://github.com/myorg/app/releases/tag/v1.2.3",
    )
    github.update_release.side_effect = RuntimeError("404 Not Found")
    llm = AsyncMock(spec=LLMClient)
    llm.summarize.return_value = "# What's New"
    slack = AsyncMock(spec=SlackNotifier)
    return ReleaseNotesWorkflow(
        settings, NotifierConfig(), github=github, llm=llm, slack=slack
    )


def json_lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_production_emits_json_lines(self, streams) -> None:
        out, err = streams
        setup_logging(environment="production", log_level="INFO")

        get_logger("release_notifier.tests").info(
            "release_created", repo="myorg/app", tag="v1.2.3"
        )

        [record] = json_lines(err.getvalue())
        assert record["event"] == "release_created"
        assert record["repo"] == "myorg/app"
        assert record["tag"] == "v1.2.3"
        assert record["level"] == "info"
        assert "timestamp" in record
        assert out.getvalue() == ""

    def test_level_filters_events(self, streams) -> None:
        _, err = streams
        setup_logging(environment="production", log_level="WARNING")

        logger = get_logger("release_notifier.tests")
        logger.info("release_created")
        logger.warning("release_body_empty")

        assert [r["event"] for r in json_lines(err.getvalue())] == ["release_body_empty"]

    def test_reads_environment_variables(
        self, streams, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _, err = streams
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "error")
        setup_logging()

        logger = get_logger("release_notifier.tests")
        logger.warning("summary_sections_missing")
        logger.error("workflow_failed")

        assert [r["event"] for r in json_lines(err.getvalue())] == ["workflow_failed"]

    def test_development_output_goes_to_stderr(self, streams) -> None:
        out, err = streams
        setup_logging(environment="development", log_level="INFO")

        get_logger("release_notifier.tests").info("release_created", tag="v1.2.3")

        assert "release_created" in err.getvalue()
        assert out.getvalue() == ""


class TestGuardedStepLogging:
    """Failures in guarded steps are reported on stderr."""

    @pytest.mark.asyncio
    async def test_update_failure_is_logged_to_stderr(
        self, streams, failing_update_workflow: ReleaseNotesWorkflow
    ) -> None:
        out, err = streams
        setup_logging(environment="production", log_level="INFO")

        result = await failing_update_workflow.run()

        assert result.release_updated is False
        records = json_lines(err.getvalue())
        [failure] = [r for r in records if r["event"] == "release_update_failed"]
        assert failure["level"] == "error"
        assert failure["release_id"] == 101
        assert "404 Not Found" in failure["exception"]
        assert "release_update_failed" not in out.getvalue()
