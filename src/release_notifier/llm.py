"""OpenAI LLM client wrapper for release notes summarization.

This module encapsulates all interaction with the OpenAI API:
- Client initialization and configuration
- A single chat completion request per summary
- Extraction of the generated text

Design notes:
- The response is returned verbatim; no structure is enforced
- There is no retry: a failed request fails the run
- All LLM calls go through this module so we can swap providers later
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from openai import AsyncOpenAI
from pydantic import BaseModel

from release_notifier.logging_config import get_logger
from release_notifier.prompts.release_notes import (
    DEFAULT_EXCLUDED_KEYWORDS,
    build_release_notes_prompt,
)

logger = get_logger(__name__)


class LLMConfig(BaseModel):
    """Configuration for the LLM client.

    Attributes:
        model: OpenAI model identifier (e.g., "gpt-4", "gpt-4o-mini")
        temperature: Sampling temperature; omitted from the request when None
        max_tokens: Maximum tokens in the response; omitted when None
        api_key: OpenAI API key (loaded from env if not provided)
    """

    model: str = "gpt-4"
    temperature: float | None = None
    max_tokens: int | None = None
    api_key: str | None = None


class LLMClient:
    """Async wrapper around the OpenAI chat completions API.

    Usage:
        client = LLMClient(config=LLMConfig(api_key="sk-..."))
        notes = await client.summarize("fix: crash on startup")
    """

    def __init__(
        self,
        config: LLMConfig | None = None,
        excluded_keywords: Sequence[str] = DEFAULT_EXCLUDED_KEYWORDS,
    ) -> None:
        """Initialize the LLM client.

        Args:
            config: LLM configuration. Uses defaults if not provided.
            excluded_keywords: Topics the prompt tells the model to skip
        """
        self.config = config or LLMConfig()
        self.excluded_keywords = list(excluded_keywords)
        # With api_key=None the SDK reads OPENAI_API_KEY itself.
        self._client = AsyncOpenAI(api_key=self.config.api_key)

    async def summarize(self, content: str) -> str:
        """Summarize a commit log into release notes.

        Args:
            content: Commit log / release body text

        Returns:
            The model's text, unmodified. An empty string if the model
            returned no content.

        Raises:
            openai.APIError: If the OpenAI API call fails
        """
        prompt = build_release_notes_prompt(content, self.excluded_keywords)
        return await self.complete(prompt)

    async def complete(self, prompt: str) -> str:
        """Send one user message and return the first choice's text."""
        response = await self._client.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": prompt}],
            **self._sampling_options(),
        )
        content = response.choices[0].message.content
        if content is None:
            logger.warning("summary_empty", model=self.config.model)
            return ""

        logger.info(
            "release_notes_summarized",
            model=self.config.model,
            prompt_chars=len(prompt),
            summary_chars=len(content),
        )
        return content

    def _sampling_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.config.temperature is not None:
            options["temperature"] = self.config.temperature
        if self.config.max_tokens is not None:
            options["max_tokens"] = self.config.max_tokens
        return options
