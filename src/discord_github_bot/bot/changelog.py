"""
Changelog message formatting for the /changelog command.
"""

from discord_github_bot.github.models import CommitComparison


# Older commits are dropped to stay within Discord's message length limit.
MAX_LISTED_COMMITS = 10


def comparison_key(base: str, head: str) -> str:
    return f"{base}...{head}"


def format_changelog_message(base: str, head: str, comparison: CommitComparison) -> str:
    """
    Render a comparison as a Discord message.

    Lists the last ten commits with short SHA, subject line and author,
    followed by a link to the full comparison on GitHub.
    """
    lines = [
        f"## Changes from {base} to {head}\n",
        f"Total commits: {comparison.total_commits}\n\n",
    ]

    commits = comparison.commits
    if len(commits) > MAX_LISTED_COMMITS:
        lines.append(f"*Showing last {MAX_LISTED_COMMITS} of {len(commits)} commits*\n\n")
        commits = commits[-MAX_LISTED_COMMITS:]

    for commit in commits:
        lines.append(
            f"- [`{commit.short_sha}`](<{commit.html_url}>) {commit.subject} - *{commit.author}*\n"
        )

    lines.append(f"\n[View Full Comparison](<{comparison.html_url}>)")
    return "".join(lines)
