"""
Interaction handlers for the Discord GitHub Bot.

This module implements what each command, autocomplete request, form
submission and button click does. Every handler answers the user itself:
configuration gaps, missing sessions and GitHub failures all end in a
user-facing message rather than an exception.

Multi-part forms work like this:

1. `/bug` (or `/feature`) resolves the configured fields. With more than
   five fields a ModalSession is stored under `{command}_{channel}_{user}`.
2. The first page is shown as modal `modal_{command}_{channel}`.
3. Each submitted page is merged into the session. While fields remain,
   the user gets a "Part X of Y complete" message with a Continue button
   (`continue_{key}`), which opens the next page (`modal_continue_{key}`).
4. When every field has a value the issue is created and the session is
   deleted, whether or not creation succeeded.
"""

from typing import Awaitable, Callable, Dict, List, Optional

from discord_github_bot.cache import KeyedTTLCache, TTLCache
from discord_github_bot.bot.changelog import comparison_key, format_changelog_message
from discord_github_bot.bot.responses import (
    ContinueButton,
    InteractionEvent,
    ModalForm,
    Responder,
)
from discord_github_bot.faq import FAQCatalog, MAX_CHOICES
from discord_github_bot.github.client import GitHubClient
from discord_github_bot.github.models import Release
from discord_github_bot.modals.assembler import (
    format_legacy_body,
    is_complete,
    merge_submission,
    render_body,
    resolve_label,
)
from discord_github_bot.modals.chunker import first_page, needs_multiple_pages, paginate
from discord_github_bot.modals.models import (
    ModalSession,
    continuation_modal_custom_id,
    continue_button_custom_id,
    modal_custom_id,
    session_key,
)
from discord_github_bot.modals.registry import ModalRegistry
from discord_github_bot.modals.session_store import ModalSessionStore
from discord_github_bot.utils.exceptions import ModalNotConfiguredError, TemplateFetchError
from discord_github_bot.utils.logging import get_logger, log_error, log_session_event


Handler = Callable[[InteractionEvent, Responder], Awaitable[None]]

HELP_TEXT = (
    "**How to get help or make a suggestion:**\n"
    "`/bug`: To report a bug with the app.\n"
    "`/feature`: To request a new feature. \n"
    "`/faq`: Frequently Asked Questions.\n"
    "`/changelog`: View changes between two versions.\n"
    "`/repo`: Get the GitHub URL for a repository.\n"
)

SESSION_EXPIRED = "❌ Session expired. Please start over."
ISSUE_FAILED = "❌ Failed to create issue. Please try again later."
ISSUE_CONFIG_ERROR = "❌ Failed to create issue. Configuration error."
ISSUE_CREATED = "✅ Issue #{number} created successfully!\n{url}"
MARKDOWN_NOTE = (
    "\n\n**Note:** You can use Markdown formatting in your descriptions. "
    "To add images or other attachments, please edit the issue directly on GitHub."
)
PART_COMPLETE = "Part {current} of {total} complete. Click 'Continue' to proceed."

COMMAND_NOUNS = {
    "bug": "bug report",
    "feature": "feature request",
}


def not_configured_message(command: str) -> str:
    noun = COMMAND_NOUNS.get(command, command)
    return f"Sorry, the {noun} command is not configured for this channel."


def unavailable_message(command: str) -> str:
    noun = COMMAND_NOUNS.get(command, command)
    return f"Sorry, the {noun} form could not be loaded right now. Please try again later."


class InteractionHandlers:
    """
    The bot's behaviour, one coroutine per interaction type.

    All shared state (session store, caches) is passed in by the bot so
    there is exactly one instance of each per process.

    Attributes:
        store: In-progress multi-part submissions
        registry: Modal configuration
        github: GitHub API client
        faq: FAQ catalog, None when no FAQ file was loaded
        releases: Release list cache for changelog autocomplete
        comparisons: Formatted changelog messages keyed by "{base}...{head}"
        release_limit: Number of releases fetched for autocomplete
    """

    def __init__(
        self,
        store: ModalSessionStore,
        registry: ModalRegistry,
        github: GitHubClient,
        releases: TTLCache[List[Release]],
        comparisons: KeyedTTLCache[str],
        faq: Optional[FAQCatalog] = None,
        release_limit: int = 100,
    ) -> None:
        self.store = store
        self.registry = registry
        self.github = github
        self.releases = releases
        self.comparisons = comparisons
        self.faq = faq
        self.release_limit = release_limit
        self.logger = get_logger(__name__)

    # Commands

    async def tapsign(self, event: InteractionEvent, responder: Responder) -> None:
        await responder.send_message(HELP_TEXT)

    async def issue_form(self, event: InteractionEvent, responder: Responder) -> None:
        """
        Show the first page of the issue form configured for this channel.

        Forms longer than one page get a session so later pages can be
        merged into it.
        """
        command = event.name
        try:
            definition = await self.registry.resolve(command, event.channel_id)
        except ModalNotConfiguredError:
            self.logger.info(
                "Modal not configured for channel",
                command=command,
                channel_id=event.channel_id,
            )
            await responder.send_message(not_configured_message(command), ephemeral=True)
            return
        except TemplateFetchError as e:
            log_error(e, {"command": command, "channel_id": event.channel_id})
            await responder.send_message(unavailable_message(command), ephemeral=True)
            return

        if not definition.fields:
            self.logger.warning("Modal has no fields", command=command, channel_id=event.channel_id)
            await responder.send_message(not_configured_message(command), ephemeral=True)
            return

        if needs_multiple_pages(definition.fields):
            key = session_key(command, event.channel_id, event.user_id)
            self.store.create(key, ModalSession.from_definition(key, definition, event.channel_id))

        await responder.send_modal(ModalForm(
            custom_id=modal_custom_id(command, event.channel_id),
            title=definition.title,
            fields=first_page(definition.fields),
        ))

    async def faq_command(self, event: InteractionEvent, responder: Responder) -> None:
        topic = event.options.get("topic", "")
        if not topic:
            await responder.send_message(
                "Please select a FAQ topic from the autocomplete options.",
                ephemeral=True,
            )
            return

        if self.faq is None:
            await responder.send_message(
                "FAQ data is not available. Please contact an administrator.",
                ephemeral=True,
            )
            return

        item = self.faq.find(topic)
        if item is None:
            await responder.send_message(f"FAQ topic '{topic}' not found.", ephemeral=True)
            return

        await responder.send_message(f"**{item.name}**\n{item.url}")

    async def changelog(self, event: InteractionEvent, responder: Responder) -> None:
        base = event.options.get("base", "")
        head = event.options.get("head", "")
        if not base or not head:
            await responder.send_message(
                "Please provide both base and head versions.",
                ephemeral=True,
            )
            return

        # The comparison can take longer than Discord's 3 second window.
        await responder.defer()

        try:
            message = await self.changelog_message(base, head)
        except Exception as e:
            log_error(e, {"base": base, "head": head})
            await responder.edit_original(f"Failed to compare versions: {base}...{head}")
            return

        await responder.edit_original(message)

    async def changelog_message(self, base: str, head: str) -> str:
        """Formatted comparison of `base` and `head`, cached per pair."""
        owner, repo = self.registry.default_target()

        async def fetch() -> str:
            comparison = await self.github.compare_commits(owner, repo, base, head)
            return format_changelog_message(base, head, comparison)

        return await self.comparisons.get_or_fetch(comparison_key(base, head), fetch)

    async def repo(self, event: InteractionEvent, responder: Responder) -> None:
        owner, default_repo = self.registry.default_target()
        name = event.options.get("name") or default_repo

        await responder.defer()

        try:
            repository = await self.github.get_repository(owner, name)
        except Exception as e:
            log_error(e, {"owner": owner, "repo": name})
            await responder.edit_original(
                f"Repository `{owner}/{name}` not found in the organization."
            )
            return

        await responder.edit_original(repository.html_url)

    # Autocomplete

    async def faq_autocomplete(self, event: InteractionEvent, responder: Responder) -> None:
        if self.faq is None:
            await responder.send_autocomplete([])
            return
        await responder.send_autocomplete(self.faq.suggest(event.focused_value))

    async def changelog_autocomplete(self, event: InteractionEvent, responder: Responder) -> None:
        """Suggest release tags matching what the user has typed so far."""
        owner, repo = self.registry.default_target()

        async def fetch() -> List[Release]:
            return await self.github.list_releases(owner, repo, self.release_limit)

        try:
            releases = await self.releases.get_or_fetch(fetch)
        except Exception as e:
            log_error(e, {"cache": "releases"})
            releases = self.releases.peek() or []

        query = event.focused_value.lower()
        choices = []
        for release in releases:
            if not query or query in release.tag_name.lower():
                choices.append(release.tag_name)
            if len(choices) >= MAX_CHOICES:
                break

        await responder.send_autocomplete(choices)

    # Form submissions and buttons

    async def continue_submission(
        self,
        event: InteractionEvent,
        responder: Responder,
        key: str,
    ) -> None:
        """Handle a follow-up page (`modal_continue_{key}`)."""
        session = self.store.get(key)
        if session is None:
            log_session_event("missing", key, source="modal")
            await responder.send_message(SESSION_EXPIRED, ephemeral=True)
            return

        await self.advance_session(event, responder, session)

    async def advance_session(
        self,
        event: InteractionEvent,
        responder: Responder,
        session: ModalSession,
    ) -> None:
        """
        Merge a submitted page and either offer the next one or file the issue.
        """
        key = session.session_key
        known = {spec.custom_id for spec in session.fields}
        unknown = sorted(set(event.values) - known)
        if unknown:
            self.logger.warning("Ignoring unknown fields", session_key=key, custom_ids=unknown)
        values = {k: v for k, v in event.values.items() if k in known}

        collected = merge_submission(session, values)
        page = paginate(session.fields, collected)

        if not page.is_complete:
            log_session_event(
                "advanced",
                key,
                collected=collected,
                total=len(session.fields),
            )
            await responder.send_message(
                PART_COMPLETE.format(current=page.current_page, total=page.total_pages),
                ephemeral=True,
                button=ContinueButton(custom_id=continue_button_custom_id(key)),
            )
            return

        body = render_body(session.collected, event.username, event.user_id, session.fields)
        try:
            issue = await self.github.create_issue(
                session.owner,
                session.repo,
                session.title,
                body,
                list(session.labels),
            )
        except Exception as e:
            log_error(e, {"session_key": key, "repository": f"{session.owner}/{session.repo}"})
            self.store.delete(key)
            await responder.send_message(ISSUE_FAILED, ephemeral=True)
            return

        log_session_event("completed", key, issue_number=issue.number)
        self.store.delete(key)
        await responder.send_message(
            ISSUE_CREATED.format(number=issue.number, url=issue.html_url) + MARKDOWN_NOTE,
            ephemeral=True,
        )

    async def single_page_submission(
        self,
        event: InteractionEvent,
        responder: Responder,
        command: str,
    ) -> None:
        """
        File an issue from a form that fit on one page.

        A `{command}_title` field becomes the issue title and a
        `{command}_description` field the body. Forms without a description
        field (e.g. from issue templates) get every field rendered as a
        section instead.
        """
        try:
            definition = await self.registry.resolve(command, event.channel_id)
        except (ModalNotConfiguredError, TemplateFetchError) as e:
            self.logger.warning(
                "Submitted form does not resolve to a modal",
                command=command,
                channel_id=event.channel_id,
                error=str(e),
            )
            await responder.send_message(ISSUE_CONFIG_ERROR, ephemeral=True)
            return

        values = event.values
        title = values.get(f"{command}_title") or definition.title
        description = values.get(f"{command}_description")

        if description is not None:
            body = format_legacy_body(event.username, event.user_id, description)
        else:
            fields = definition.fields
            collected: Dict[str, str] = {}
            for custom_id, value in values.items():
                collected[resolve_label(fields, custom_id)] = value
            body = render_body(collected, event.username, event.user_id, fields)

        owner, repo, labels = definition.owner, definition.repo, list(definition.labels)

        try:
            issue = await self.github.create_issue(owner, repo, title, body, labels)
        except Exception as e:
            log_error(e, {"command": command, "repository": f"{owner}/{repo}"})
            await responder.send_message(ISSUE_FAILED, ephemeral=True)
            return

        self.logger.info("Issue created", command=command, issue_number=issue.number)
        await responder.send_message(
            ISSUE_CREATED.format(number=issue.number, url=issue.html_url),
            ephemeral=True,
        )

    async def show_next_page(
        self,
        event: InteractionEvent,
        responder: Responder,
        key: str,
    ) -> None:
        """Open the next page of a multi-part form (Continue button)."""
        session = self.store.get(key)
        if session is None:
            log_session_event("missing", key, source="button")
            await responder.send_message(SESSION_EXPIRED, ephemeral=True)
            return

        if is_complete(session):
            # Only reachable if the final page was submitted twice.
            self.logger.warning("Continue clicked on a complete session", session_key=key)
            await responder.send_message(SESSION_EXPIRED, ephemeral=True)
            return

        page = paginate(session.fields, len(session.collected))
        await responder.send_modal(ModalForm(
            custom_id=continuation_modal_custom_id(key),
            title=session.title,
            fields=page.remaining,
        ))
