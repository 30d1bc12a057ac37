"""GitHub API integration for the Discord bot."""

from discord_github_bot.github.client import GitHubAPIClient, GitHubClient
from discord_github_bot.github.models import (
    CommitComparison,
    ComparisonCommit,
    CreatedIssue,
    Release,
    Repository,
)

__all__ = [
    "GitHubAPIClient",
    "GitHubClient",
    "CommitComparison",
    "ComparisonCommit",
    "CreatedIssue",
    "Release",
    "Repository",
]
