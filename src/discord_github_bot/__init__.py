"""
Discord GitHub Bot - turns Discord interactions into GitHub issues.

This package provides a Discord bot that lets community members file bug
reports and feature requests as GitHub issues through Discord modals,
look up FAQ entries, browse changelogs between releases and find
repository links.

Key Features:
- Issue forms of any length, split into 5-input modal pages
- Forms defined in YAML or read from GitHub issue templates
- Cached release listings and changelog comparisons
- Health check endpoint for container deployments

Example:
    Basic usage:

    ```python
    from discord_github_bot.main import main

    if __name__ == "__main__":
        main()
    ```
"""

__version__ = "0.1.0"

# Only import main function to avoid circular dependencies during development
def main():
    """Main entry point for the Discord GitHub Bot."""
    from discord_github_bot.main import main as _main
    return _main()

__all__ = ["main", "__version__"]
