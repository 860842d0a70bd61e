"""Configuration for the release notifier.

Two sources:
- Secrets and run identity come from the environment, which is how CI
  hands them over (GITHUB_TOKEN, GITHUB_REPOSITORY, RELEASE_TAG,
  OPENAI_API_KEY, SLACK_WEBHOOK_URL).
- Non-secret options (model, product name, keyword filter) come from an
  optional YAML file so a repository can tune them without touching the
  workflow definition.

Both are validated up front. A ConfigError is raised before any client is
built, so a misconfigured run never touches the network.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from release_notifier.exceptions import ConfigError
from release_notifier.prompts.release_notes import DEFAULT_EXCLUDED_KEYWORDS

REQUIRED_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "RELEASE_TAG",
    "OPENAI_API_KEY",
    "SLACK_WEBHOOK_URL",
)

CONFIG_PATH_ENV_VAR = "RELEASE_NOTIFIER_CONFIG"
MODEL_ENV_VAR = "OPENAI_MODEL"


# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """Required values for a run, read from the environment."""

    github_token: str
    github_repository: str
    release_tag: str
    openai_api_key: str
    slack_webhook_url: str

    @property
    def owner(self) -> str:
        return self.github_repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.github_repository.split("/", 1)[1]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Validated Settings

        Raises:
            ConfigError: If any required variable is missing or blank, or
                GITHUB_REPOSITORY is not in "owner/repo" form. All missing
                variables are reported together.
        """
        env = os.environ if environ is None else environ
        values = {name: (env.get(name) or "").strip() for name in REQUIRED_ENV_VARS}

        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)} "
                "(set them in your CI environment)",
                missing=missing,
            )

        repository = values["GITHUB_REPOSITORY"]
        owner, _, repo = repository.partition("/")
        if not owner or not repo or "/" in repo:
            raise ConfigError(
                f"GITHUB_REPOSITORY must look like 'owner/repo', got {repository!r}"
            )

        return cls(
            github_token=values["GITHUB_TOKEN"],
            github_repository=repository,
            release_tag=values["RELEASE_TAG"],
            openai_api_key=values["OPENAI_API_KEY"],
            slack_webhook_url=values["SLACK_WEBHOOK_URL"],
        )


# ---------------------------------------------------------------------------
# Optional YAML options
# ---------------------------------------------------------------------------


class NotifierConfig(BaseModel):
    """Tunable, non-secret options.

    Attributes:
        model: OpenAI chat model used for the summary
        temperature: Sampling temperature; the API default when unset
        max_tokens: Response token cap; the API default when unset
        product_name: Name used in the Slack announcement; the repository
            name when unset
        mention: Slack mention prefixed to the announcement
        excluded_keywords: Topics the model is told to leave out
        generate_release_notes: Ask GitHub to pre-fill the new release body
            with its generated notes, which then become the summary input
    """

    model: str = "gpt-4"
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, gt=0)
    product_name: str | None = None
    mention: str = "@channel"
    excluded_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_KEYWORDS)
    )
    generate_release_notes: bool = False


def load_notifier_config(
    path: str | Path | None,
    *,
    required: bool = False,
) -> NotifierConfig:
    """Load and validate a YAML options file.

    Args:
        path: Path to the YAML file, or None for defaults.
        required: Treat a missing file as an error instead of using defaults.

    Returns:
        A validated NotifierConfig. Returns defaults if the file doesn't exist
        and isn't required.

    Raises:
        ConfigError: If a required file is missing, or the YAML content is
            invalid or fails validation.
    """
    if path is None:
        return NotifierConfig()

    config_path = Path(path)
    if not config_path.exists():
        if required:
            raise ConfigError(f"Notifier config file not found: {path}")
        return NotifierConfig()

    try:
        raw = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid notifier config in {path}: expected a mapping")

    try:
        return NotifierConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid notifier config in {path}: {exc}") from exc


def resolve_notifier_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> NotifierConfig:
    """Load options from `path` or RELEASE_NOTIFIER_CONFIG, then apply OPENAI_MODEL.

    An explicit `path` must exist; a RELEASE_NOTIFIER_CONFIG path that doesn't
    falls back to defaults.
    """
    env = os.environ if environ is None else environ
    if path:
        config = load_notifier_config(path, required=True)
    else:
        config = load_notifier_config(env.get(CONFIG_PATH_ENV_VAR) or None)

    model = (env.get(MODEL_ENV_VAR) or "").strip()
    if model:
        config = config.model_copy(update={"model": model})
    return config
