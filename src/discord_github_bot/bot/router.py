"""
Interaction routing for the Discord GitHub Bot.

Commands and autocomplete requests are routed by command name. Form
submissions and button clicks are routed by custom id:

- `modal_continue_{key}`: a follow-up page of session `key`
- `modal_{command}_{channel}`: a first page; multi-part when the user has
  a session for `{command}_{channel}_{user}`, single-page otherwise
- `continue_{key}`: the Continue button of session `key`
"""

from typing import Dict

from discord_github_bot.bot.handlers import Handler, InteractionHandlers
from discord_github_bot.bot.responses import InteractionEvent, InteractionKind, Responder
from discord_github_bot.modals.models import CONTINUE_PREFIX, MODAL_PREFIX, session_key
from discord_github_bot.modals.session_store import ModalSessionStore
from discord_github_bot.utils.logging import get_logger, log_discord_event, log_error


class InteractionRouter:
    """
    Dispatches interactions to handlers.

    Nothing raised by a handler escapes `dispatch`: errors are logged and
    the interaction is dropped.
    """

    def __init__(self, store: ModalSessionStore, handlers: InteractionHandlers) -> None:
        self.store = store
        self.handlers = handlers
        self.logger = get_logger(__name__)

        self.command_handlers: Dict[str, Handler] = {
            "tapsign": handlers.tapsign,
            "faq": handlers.faq_command,
            "bug": handlers.issue_form,
            "feature": handlers.issue_form,
            "changelog": handlers.changelog,
            "repo": handlers.repo,
        }
        self.autocomplete_handlers: Dict[str, Handler] = {
            "faq": handlers.faq_autocomplete,
            "changelog": handlers.changelog_autocomplete,
        }

    async def dispatch(self, event: InteractionEvent, responder: Responder) -> None:
        log_discord_event(
            event.kind.value,
            name=event.name or None,
            custom_id=event.custom_id or None,
            channel_id=event.channel_id,
            user_id=event.user_id,
        )

        try:
            if event.kind is InteractionKind.COMMAND:
                await self._route_by_name(self.command_handlers, event, responder)
            elif event.kind is InteractionKind.AUTOCOMPLETE:
                await self._route_by_name(self.autocomplete_handlers, event, responder)
            elif event.kind is InteractionKind.MODAL_SUBMIT:
                await self._route_modal_submit(event, responder)
            elif event.kind is InteractionKind.COMPONENT:
                await self._route_component(event, responder)
        except Exception as e:
            log_error(e, {
                "kind": event.kind.value,
                "name": event.name,
                "custom_id": event.custom_id,
                "channel_id": event.channel_id,
                "user_id": event.user_id,
            })

    async def _route_by_name(
        self,
        table: Dict[str, Handler],
        event: InteractionEvent,
        responder: Responder,
    ) -> None:
        handler = table.get(event.name)
        if handler is None:
            self.logger.debug("No handler for interaction", kind=event.kind.value, name=event.name)
            return
        await handler(event, responder)

    async def _route_modal_submit(self, event: InteractionEvent, responder: Responder) -> None:
        parts = event.custom_id.split("_")
        if len(parts) < 2 or parts[0] != MODAL_PREFIX:
            self.logger.warning("Malformed modal custom id", custom_id=event.custom_id)
            return

        if parts[1] == CONTINUE_PREFIX and len(parts) >= 3:
            await self.handlers.continue_submission(event, responder, "_".join(parts[2:]))
            return

        command = parts[1]
        key = session_key(command, event.channel_id, event.user_id)
        session = self.store.get(key)
        if session is not None:
            await self.handlers.advance_session(event, responder, session)
        else:
            await self.handlers.single_page_submission(event, responder, command)

    async def _route_component(self, event: InteractionEvent, responder: Responder) -> None:
        prefix = f"{CONTINUE_PREFIX}_"
        if not event.custom_id.startswith(prefix):
            self.logger.debug("Ignoring component", custom_id=event.custom_id)
            return

        await self.handlers.show_next_page(event, responder, event.custom_id[len(prefix):])
