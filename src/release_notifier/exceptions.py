"""Exceptions raised by the release notifier."""

from __future__ import annotations


class ReleaseNotifierError(Exception):
    """Base exception for release notifier errors."""


class ConfigError(ReleaseNotifierError):
    """Raised when required configuration is missing or invalid.

    Always raised before any client is built or any request is sent.
    """

    def __init__(self, message: str, *, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []
