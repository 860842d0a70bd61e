"""Slack announcement for a published release.

The announcement is written as markdown, parsed into a mistune AST,
mapped to Block Kit blocks and POSTed to an incoming webhook as
{"blocks": [...]}.

Markdown → Block Kit mapping:
- heading                  → header block (plain text, max 150 chars)
- thematic break           → divider block
- fenced/indented code     → section block wrapped in ``` ```
- paragraph, list, quote   → section block(s) of mrkdwn, max 3000 chars each
- [text](url)              → <url|text>
- **bold**                 → *bold*
- *italic*                 → _italic_
- ~~strike~~               → ~strike~
- list items               → "• item" (ordered lists keep their numbers)
- @channel/@here/@everyone → <!channel>/<!here>/<!everyone>

Slack webhooks docs: https://api.slack.com/messaging/webhooks
"""

from __future__ import annotations

import re
from typing import Any

import httpx
import mistune

from release_notifier.logging_config import get_logger

logger = get_logger(__name__)

SLACK_HEADER_TEXT_LIMIT = 150
SLACK_BLOCK_TEXT_LIMIT = 3000
SLACK_MAX_BLOCKS = 50

ANNOUNCEMENT_TEMPLATE = (
    "{mention}\n"
    "New Release for {product_name} is out! 🎉\n"
    "Check the release notes below:\n"
    "[View Release in Github]({release_url})"
)

_MENTION_RE = re.compile(r"(?<![\w<!])@(channel|here|everyone)\b")

# renderer=None makes mistune return the token tree instead of HTML.
_parse_markdown = mistune.create_markdown(renderer=None, plugins=["strikethrough"])


def build_announcement(
    release_url: str,
    product_name: str,
    mention: str = "@channel",
) -> str:
    """Build the markdown announcement for a release."""
    return ANNOUNCEMENT_TEMPLATE.format(
        mention=mention,
        product_name=product_name,
        release_url=release_url,
    ).lstrip("\n")


# ---------------------------------------------------------------------------
# Markdown conversion
# ---------------------------------------------------------------------------


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _plain_text(tokens: list[dict[str, Any]]) -> str:
    """Flatten inline tokens to unformatted text for plain_text fields."""
    parts = []
    for token in tokens:
        if "children" in token:
            parts.append(_plain_text(token["children"]))
        elif token["type"] in ("softbreak", "linebreak"):
            parts.append(" ")
        else:
            parts.append(token.get("raw", ""))
    return "".join(parts)


def _render_inline(tokens: list[dict[str, Any]]) -> str:
    """Render inline tokens as Slack mrkdwn."""
    parts: list[str] = []
    text: list[str] = []

    def flush_text() -> None:
        # Adjacent text tokens are joined so mentions split across them still match.
        if text:
            parts.append(_MENTION_RE.sub(r"<!\1>", _escape("".join(text))))
            text.clear()

    for token in tokens:
        kind = token["type"]
        if kind == "text":
            text.append(token["raw"])
            continue
        flush_text()
        if kind == "strong":
            parts.append(f"*{_render_inline(token['children'])}*")
        elif kind == "emphasis":
            parts.append(f"_{_render_inline(token['children'])}_")
        elif kind == "strikethrough":
            parts.append(f"~{_render_inline(token['children'])}~")
        elif kind == "codespan":
            parts.append(f"`{_escape(token['raw'])}`")
        elif kind in ("link", "image"):
            url = token["attrs"]["url"]
            label = _render_inline(token.get("children", []))
            parts.append(f"<{url}|{label}>" if label and label != url else f"<{url}>")
        elif kind in ("softbreak", "linebreak"):
            parts.append("\n")
        elif "children" in token:
            parts.append(_render_inline(token["children"]))
        else:
            parts.append(_escape(token.get("raw", "")))
    flush_text()
    return "".join(parts)


def _render_list(token: dict[str, Any], depth: int = 0) -> list[str]:
    attrs = token.get("attrs", {})
    number = attrs.get("start", 1)
    indent = "  " * depth
    lines: list[str] = []
    for item in token["children"]:
        marker = f"{number}." if attrs.get("ordered") else "•"
        number += 1
        first = True
        for child in item["children"]:
            if child["type"] == "list":
                lines.extend(_render_list(child, depth + 1))
                continue
            for line in _render_block(child).split("\n"):
                lines.append(f"{indent}{marker} {line}" if first else f"{indent}  {line}")
                first = False
    return lines


def _render_block(token: dict[str, Any]) -> str:
    """Render a paragraph-like block token as Slack mrkdwn."""
    kind = token["type"]
    if kind in ("paragraph", "block_text"):
        return _render_inline(token["children"])
    if kind == "list":
        return "\n".join(_render_list(token))
    if kind == "block_quote":
        inner = "\n".join(_render_block(child) for child in token["children"])
        return "\n".join(f"> {line}" for line in inner.split("\n"))
    if "children" in token:
        return _render_inline(token["children"])
    return _escape(token.get("raw", "").rstrip("\n"))


def _chunk_text(text: str, limit: int = SLACK_BLOCK_TEXT_LIMIT) -> list[str]:
    """Split text into chunks of at most `limit` chars on newline boundaries."""
    chunks: list[str] = []
    current: list[str] = []
    current_len = 0
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append("\n".join(current))
                current, current_len = [], 0
            chunks.append(line[:limit])
            line = line[limit:]
        added = len(line) + (1 if current else 0)
        if current and current_len + added > limit:
            chunks.append("\n".join(current))
            current, current_len = [], 0
            added = len(line)
        current.append(line)
        current_len += added
    if current:
        chunks.append("\n".join(current))
    return chunks


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def markdown_to_blocks(markdown: str) -> list[dict[str, Any]]:
    """Convert a markdown document to Slack Block Kit blocks.

    Args:
        markdown: Markdown text

    Returns:
        A list of block dicts, at most SLACK_MAX_BLOCKS long. When the
        document needs more, the last block says it was truncated.
    """
    blocks: list[dict[str, Any]] = []

    for token in _parse_markdown(markdown):
        kind = token["type"]
        if kind == "blank_line":
            continue
        if kind == "heading":
            title = _plain_text(token["children"]).strip()[:SLACK_HEADER_TEXT_LIMIT]
            blocks.append(
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": title, "emoji": True},
                }
            )
        elif kind == "thematic_break":
            blocks.append({"type": "divider"})
        elif kind == "block_code":
            code = _escape(token["raw"].rstrip("\n"))
            limit = SLACK_BLOCK_TEXT_LIMIT - len("```\n\n```")
            blocks.extend(_section(f"```\n{chunk}\n```") for chunk in _chunk_text(code, limit))
        else:
            text = _render_block(token)
            if text.strip():
                blocks.extend(_section(chunk) for chunk in _chunk_text(text))

    if len(blocks) > SLACK_MAX_BLOCKS:
        blocks = blocks[: SLACK_MAX_BLOCKS - 1]
        blocks.append(_section("_[truncated]_"))
    return blocks


# ---------------------------------------------------------------------------
# Webhook client
# ---------------------------------------------------------------------------


class SlackNotifier:
    """Posts release announcements to a Slack incoming webhook.

    Usage:
        notifier = SlackNotifier(webhook_url, product_name="AIChat")
        await notifier.notify("https://github.com/myorg/app/releases/tag/v1.2.3")
    """

    def __init__(
        self,
        webhook_url: str,
        product_name: str,
        *,
        mention: str = "@channel",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            webhook_url: Slack incoming webhook URL
            product_name: Name used in the announcement text
            mention: Mention placed at the top of the announcement
            transport: Optional httpx transport (used by tests)
        """
        if not webhook_url:
            raise ValueError("Slack webhook URL is required")
        self._webhook_url = webhook_url
        self.product_name = product_name
        self.mention = mention
        self._transport = transport

    async def notify(self, release_url: str) -> list[dict[str, Any]]:
        """Announce a release.

        Args:
            release_url: Browser URL of the published release

        Returns:
            The blocks that were posted

        Raises:
            httpx.HTTPStatusError: If the webhook rejects the message
        """
        message = build_announcement(release_url, self.product_name, self.mention)
        blocks = markdown_to_blocks(message)
        await self.post_blocks(blocks)
        logger.info("release_announced", release_url=release_url, blocks=len(blocks))
        return blocks

    async def post_blocks(self, blocks: list[dict[str, Any]]) -> None:
        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            resp = await client.post(self._webhook_url, json={"blocks": blocks})
            resp.raise_for_status()
