"""
Data models for GitHub REST API payloads.

Only the fields the bot reads are modelled; everything else in the API
responses is ignored.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Release(BaseModel):
    """A repository release, as listed for changelog autocomplete."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str = Field(description="Git tag of the release")
    name: Optional[str] = Field(default=None, description="Release title")
    html_url: Optional[str] = Field(default=None, description="Release page URL")


class CreatedIssue(BaseModel):
    """The part of a created issue that is reported back to the user."""

    model_config = ConfigDict(extra="ignore")

    number: int
    html_url: str
    id: Optional[int] = None


class Repository(BaseModel):
    """A repository lookup result."""

    model_config = ConfigDict(extra="ignore")

    full_name: str
    html_url: str
    description: Optional[str] = None


class ComparisonCommit(BaseModel):
    """One commit of a comparison, flattened for display."""

    sha: str
    html_url: str
    message: str
    author: str = "Unknown"

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ComparisonCommit":
        """
        Build a commit from a compare API entry.

        The author is the GitHub login when the commit is linked to an
        account, else the git author name, else "Unknown".
        """
        commit = data.get("commit") or {}
        login = (data.get("author") or {}).get("login")
        author = login
        if not author:
            git_author = commit.get("author")
            author = git_author.get("name") if git_author else None
        return cls(
            sha=data.get("sha") or "",
            html_url=data.get("html_url") or "",
            message=commit.get("message") or "",
            author=author or "Unknown",
        )


class CommitComparison(BaseModel):
    """Result of comparing two refs."""

    total_commits: int = 0
    html_url: str = ""
    commits: List[ComparisonCommit] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CommitComparison":
        return cls(
            total_commits=data.get("total_commits") or 0,
            html_url=data.get("html_url") or "",
            commits=[ComparisonCommit.from_api(c) for c in data.get("commits") or []],
        )
