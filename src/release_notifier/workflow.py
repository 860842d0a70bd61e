"""Release notes workflow: create, summarize, update, announce.

The workflow runs four steps once, in order:
1. Create the GitHub release for the tag (failure ends the run)
2. Summarize the release body with the LLM (failure ends the run)
3. Write the summary back as the release body (failure is logged)
4. Announce the release in Slack (failure is logged)

Nothing is retried and nothing is rolled back: a release created in step 1
stays published even if a later step fails.

Entry point for CI:
    GITHUB_TOKEN=... GITHUB_REPOSITORY=myorg/app RELEASE_TAG=v1.2.3 \
    OPENAI_API_KEY=... SLACK_WEBHOOK_URL=... release-notifier
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from release_notifier.config import (
    NotifierConfig,
    Settings,
    resolve_notifier_config,
)
from release_notifier.exceptions import ConfigError
from release_notifier.github import GitHubClient, GitHubClientProtocol
from release_notifier.llm import LLMClient, LLMConfig
from release_notifier.logging_config import get_logger, setup_logging
from release_notifier.prompts.release_notes import find_missing_sections
from release_notifier.schemas import WorkflowResult
from release_notifier.slack import SlackNotifier

logger = get_logger(__name__)


class ReleaseNotesWorkflow:
    """Runs the release notes pipeline for one tag.

    Clients are built from settings unless passed in, so tests and local
    runs can swap in mocks.

    Usage:
        workflow = ReleaseNotesWorkflow(Settings.from_env(), NotifierConfig())
        result = await workflow.run()
    """

    def __init__(
        self,
        settings: Settings,
        config: NotifierConfig | None = None,
        *,
        github: GitHubClientProtocol | None = None,
        llm: LLMClient | None = None,
        slack: SlackNotifier | None = None,
    ) -> None:
        self.settings = settings
        self.config = config or NotifierConfig()
        self.github = github or GitHubClient(token=settings.github_token)
        self.llm = llm or LLMClient(
            config=LLMConfig(
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                api_key=settings.openai_api_key,
            ),
            excluded_keywords=self.config.excluded_keywords,
        )
        self.slack = slack or SlackNotifier(
            settings.slack_webhook_url,
            product_name=self.config.product_name or settings.repo,
            mention=self.config.mention,
        )

    async def run(self) -> WorkflowResult:
        """Run all four steps.

        Returns:
            What happened in this run

        Raises:
            Exception: Whatever the release creation or summary request
                raised. Update and notification errors are logged instead.
        """
        repo = self.settings.github_repository
        tag = self.settings.release_tag
        logger.info("workflow_started", repo=repo, tag=tag, model=self.config.model)

        release = await self.github.create_release(
            repo, tag, generate_release_notes=self.config.generate_release_notes
        )

        if not release.body.strip():
            logger.warning("release_body_empty", repo=repo, tag=tag)
        summary = await self.llm.summarize(release.body)

        missing = find_missing_sections(summary)
        if missing:
            # Published anyway; the layout is only a request to the model.
            logger.warning("summary_sections_missing", tag=tag, missing=missing)

        result = WorkflowResult(release=release, summary=summary, missing_sections=missing)

        try:
            await self.github.update_release(repo, release.id, summary)
            result.release_updated = True
        except Exception as e:
            logger.error(
                "release_update_failed",
                repo=repo,
                release_id=release.id,
                error=str(e),
                exc_info=True,
            )

        try:
            await self.slack.notify(release.html_url)
            result.notification_sent = True
        except Exception as e:
            logger.error(
                "slack_notification_failed",
                release_url=release.html_url,
                error=str(e),
                exc_info=True,
            )

        logger.info(
            "workflow_complete",
            repo=repo,
            tag=tag,
            release_url=release.html_url,
            release_updated=result.release_updated,
            notification_sent=result.notification_sent,
        )
        return result


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Usage:
        release-notifier
        release-notifier --config .github/release-notifier.yml

    Returns:
        0 when the release was created and summarized, 1 otherwise.
    """
    parser = argparse.ArgumentParser(
        description="Create a GitHub release, summarize its notes with an LLM "
        "and announce it in Slack",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to a YAML options file (defaults to $RELEASE_NOTIFIER_CONFIG)",
    )
    args = parser.parse_args(argv)

    setup_logging()

    try:
        settings = Settings.from_env()
        config = resolve_notifier_config(args.config)
    except ConfigError as e:
        logger.error("configuration_invalid", error=str(e), missing=e.missing)
        return 1

    workflow = ReleaseNotesWorkflow(settings, config)
    try:
        asyncio.run(workflow.run())
    except Exception as e:
        logger.error(
            "workflow_failed",
            repo=settings.github_repository,
            tag=settings.release_tag,
            error=str(e),
            exc_info=True,
        )
        return 1

    logger.info("release_notes_published", tag=settings.release_tag)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
