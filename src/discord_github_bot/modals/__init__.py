"""Multi-part issue forms: field pagination, sessions and body assembly."""

from discord_github_bot.modals.models import (
    FieldSpec,
    InputStyle,
    ModalDefinition,
    ModalSession,
    MAX_FIELDS_PER_PAGE,
)
from discord_github_bot.modals.chunker import PageInfo, paginate, split_pages
from discord_github_bot.modals.session_store import ModalSessionStore
from discord_github_bot.modals.registry import ModalRegistry

__all__ = [
    "FieldSpec",
    "InputStyle",
    "ModalDefinition",
    "ModalSession",
    "MAX_FIELDS_PER_PAGE",
    "PageInfo",
    "paginate",
    "split_pages",
    "ModalSessionStore",
    "ModalRegistry",
]
