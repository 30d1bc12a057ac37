"""Discord client, slash commands and interaction routing."""
