"""Prompt template for turning a commit log into user-facing release notes.

The model is asked for a fixed markdown layout:

    # What's New
    ## New Features
    ## Bug Fixes
    ## Extra Notes

Nothing enforces that layout. Whatever text comes back is published as
the release body; `find_missing_sections` only reports what is absent so
the workflow can log it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

DEFAULT_EXCLUDED_KEYWORDS: tuple[str, ...] = (
    "dev dependencies",
    "tools updates",
    "non-user facing changes",
    "biome",
    "linting",
    "eslint",
    "npm",
    "formatting",
    "typescript",
    "prettier",
    "husky",
)

EXPECTED_SECTIONS: tuple[str, ...] = ("New Features", "Bug Fixes", "Extra Notes")

_HEADING_RE = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]+(.*?)[ \t#]*$", re.MULTILINE)

PROMPT_TEMPLATE = """Generate clear and user-friendly release notes from these commit logs in markdown format with no special characters:
```
{content}
```
The release notes should focus only on **user-facing changes**. Ignore any internal updates or dev tools changes that do not impact the user experience.

- **Key Focus**: Only include **new features**, **bug fixes**, **enhancements**, or **important user-facing changes**.
- **Exclude**: Any updates related to development dependencies, tools, linting, formatting, or internal configurations. Specifically, exclude changes related to the following keywords:
{keywords_section}
- **Objective**: Provide users with concise, clear, and engaging descriptions of what has changed in the release.

#### **Steps:**

1. **Review** the commit messages to identify the **user-facing** changes (features, bug fixes, or other improvements).
2. **Exclude** any changes related to the keywords listed above. If a commit message or code change refers to these excluded topics, do **not include it** in the final release note.
3. **Summarize** the relevant changes into simple and professional language that a user would care about.
4. **Organize** the changes into the following sections:
    - **New Features**: List any new features or functionality that have been introduced.
    - **Bug Fixes**: List any issues that have been fixed, improving user experience or performance.
    - **Extra Notes**: Any additional important information or recommendations for users.
5. **Do not include** internal dev dependencies or non-user-facing updates.
6. **Focus on** the key changes that would directly impact users' experience.

#### **Format for Output:**

# What's New

## New Features
• [Brief description of the new feature]
• [Brief description of another new feature]

## Bug Fixes
• [Brief description of the bug fix]
• [Brief description of another bug fix]

## Extra Notes
• [Any additional notes for the users]
"""


def build_release_notes_prompt(
    content: str,
    excluded_keywords: Iterable[str] = DEFAULT_EXCLUDED_KEYWORDS,
) -> str:
    """Build the summarization prompt for a commit log.

    Args:
        content: Commit log or release body text, embedded as-is
        excluded_keywords: Topics the model should leave out

    Returns:
        The full prompt text
    """
    keywords_section = "\n".join(f"  - {kw}" for kw in excluded_keywords)
    if not keywords_section:
        keywords_section = "  - (none)"
    return PROMPT_TEMPLATE.format(content=content, keywords_section=keywords_section)


def _heading_titles(summary: str) -> set[str]:
    """Lower-cased titles of all ATX headings, without emphasis or a trailing colon."""
    titles = set()
    for match in _HEADING_RE.finditer(summary):
        title = match.group(1).replace("*", "").replace("_", "").strip()
        titles.add(title.rstrip(":").strip().lower())
    return titles


def find_missing_sections(
    summary: str,
    sections: Iterable[str] = EXPECTED_SECTIONS,
) -> list[str]:
    """Return the expected section headings that don't appear in `summary`.

    A section counts as present when a markdown heading of any level carries
    its title, ignoring case, bold/italic markers and a trailing colon
    ("## **Bug Fixes:**" matches "Bug Fixes").
    """
    titles = _heading_titles(summary)
    return [section for section in sections if section.lower() not in titles]
