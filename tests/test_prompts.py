"""Tests for the release notes prompt and the section check.

Run with: pytest tests/test_prompts.py -v
"""

from __future__ import annotations

from release_notifier.prompts.release_notes import (
    DEFAULT_EXCLUDED_KEYWORDS,
    EXPECTED_SECTIONS,
    build_release_notes_prompt,
    find_missing_sections,
)


class TestBuildReleaseNotesPrompt:
    """Tests for build_release_notes_prompt()."""

    def test_embeds_content_in_fence(self) -> None:
        prompt = build_release_notes_prompt("fix: crash on startup")
        assert "```\nfix: crash on startup\n```" in prompt

    def test_lists_default_keywords(self) -> None:
        prompt = build_release_notes_prompt("feat: dark mode")
        for keyword in DEFAULT_EXCLUDED_KEYWORDS:
            assert f"  - {keyword}" in prompt

    def test_custom_keywords_replace_defaults(self) -> None:
        prompt = build_release_notes_prompt("feat: dark mode", ["docker"])
        assert "  - docker" in prompt
        assert "  - husky" not in prompt

    def test_no_keywords(self) -> None:
        prompt = build_release_notes_prompt("feat: dark mode", [])
        assert "  - (none)" in prompt

    def test_asks_for_expected_sections(self) -> None:
        prompt = build_release_notes_prompt("")
        assert "# What's New" in prompt
        for section in EXPECTED_SECTIONS:
            assert f"## {section}" in prompt

    def test_braces_in_content_are_kept(self) -> None:
        prompt = build_release_notes_prompt("fix: handle {} in config")
        assert "fix: handle {} in config" in prompt


class TestFindMissingSections:
    """Tests for find_missing_sections()."""

    def test_complete_summary(self) -> None:
        summary = (
            "# What's New\n\n## New Features\n• Dark mode\n\n"
            "## Bug Fixes\n• Startup crash\n\n## Extra Notes\n• None\n"
        )
        assert find_missing_sections(summary) == []

    def test_reports_missing_in_order(self) -> None:
        summary = "# What's New\n\n## Bug Fixes\n• Startup crash\n"
        assert find_missing_sections(summary) == ["New Features", "Extra Notes"]

    def test_case_and_level_insensitive(self) -> None:
        summary = "### new features\n# BUG FIXES\n#### Extra notes\n"
        assert find_missing_sections(summary) == []

    def test_plain_mention_is_not_a_heading(self) -> None:
        summary = "This release has New Features and Bug Fixes."
        assert find_missing_sections(summary) == list(EXPECTED_SECTIONS)

    def test_empty_summary(self) -> None:
        assert find_missing_sections("") == list(EXPECTED_SECTIONS)

    def test_bold_headings_count(self) -> None:
        summary = "## **New Features**\n## __Bug Fixes__\n## *Extra Notes*\n"
        assert find_missing_sections(summary) == []

    def test_trailing_colon_counts(self) -> None:
        summary = "## New Features:\n## Bug Fixes:\n## **Extra Notes:**\n"
        assert find_missing_sections(summary) == []

    def test_mixed_heading_styles(self) -> None:
        summary = "## **New Features**\n## Bug Fixes:\n## Extra Notes"
        assert find_missing_sections(summary) == []

    def test_heading_with_extra_words_is_missing(self) -> None:
        summary = "## New Features and Fixes\n## Bug Fixes\n## Extra Notes\n"
        assert find_missing_sections(summary) == ["New Features"]
