"""Pydantic models for the payloads that pass between the workflow steps.

Nothing here is persisted. A `Release` is what GitHub returns for the
create and update calls; `ReleaseRequest` is what we send to create one;
`WorkflowResult` records what a single run did.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Release(BaseModel):
    """A GitHub release as returned by the REST API.

    Only the fields the workflow needs are modelled; the rest of the
    response is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Numeric release identifier")
    tag_name: str = Field(..., description="Tag the release points at")
    name: str | None = Field(None, description="Release title")
    body: str = Field("", description="Markdown release body")
    html_url: str = Field(..., description="Browser URL of the release")
    draft: bool = False
    prerelease: bool = False

    @field_validator("body", mode="before")
    @classmethod
    def _none_body_is_empty(cls, value: str | None) -> str:
        return value or ""


class ReleaseRequest(BaseModel):
    """Body of POST /repos/{owner}/{repo}/releases."""

    tag_name: str = Field(..., min_length=1)
    name: str
    body: str = ""
    draft: bool = False
    prerelease: bool = False
    generate_release_notes: bool = False

    @classmethod
    def for_tag(cls, tag_name: str, *, generate_release_notes: bool = False) -> ReleaseRequest:
        """Published, non-prerelease release named after its tag."""
        return cls(
            tag_name=tag_name,
            name=f"Release {tag_name}",
            generate_release_notes=generate_release_notes,
        )


class WorkflowResult(BaseModel):
    """Outcome of one workflow run.

    Attributes:
        release: The release created at the start of the run
        summary: Model output written (or attempted) as the release body
        release_updated: Whether the body update succeeded
        notification_sent: Whether the Slack webhook accepted the message
        missing_sections: Expected headings absent from the summary
    """

    release: Release
    summary: str
    release_updated: bool = False
    notification_sent: bool = False
    missing_sections: list[str] = Field(default_factory=list)
