"""Release notes summarizer and notifier.

A CI-triggered tool that creates a GitHub release for a tag, asks an LLM to
turn the commit log into user-facing release notes, writes the notes back to
the release and announces it in Slack.
"""

__version__ = "0.1.0"
