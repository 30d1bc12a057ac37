"""
discord.py adapters for interaction events and responses.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import discord
from discord import app_commands

from discord_github_bot.bot.responses import (
    ContinueButton,
    InteractionEvent,
    InteractionKind,
    ModalForm,
)
from discord_github_bot.modals.assembler import truncate_for_display
from discord_github_bot.modals.models import InputStyle
from discord_github_bot.utils.exceptions import DiscordAPIError


# Discord rejects modal titles and input labels longer than this.
MAX_TITLE_LENGTH = 45

INTERACTION_KINDS = {
    discord.InteractionType.application_command: InteractionKind.COMMAND,
    discord.InteractionType.autocomplete: InteractionKind.AUTOCOMPLETE,
    discord.InteractionType.modal_submit: InteractionKind.MODAL_SUBMIT,
    discord.InteractionType.component: InteractionKind.COMPONENT,
}

TEXT_STYLES = {
    InputStyle.SHORT: discord.TextStyle.short,
    InputStyle.PARAGRAPH: discord.TextStyle.paragraph,
}


def build_modal(form: ModalForm) -> discord.ui.Modal:
    modal = discord.ui.Modal(
        title=form.title[:MAX_TITLE_LENGTH],
        custom_id=form.custom_id,
    )
    for spec in form.fields:
        modal.add_item(discord.ui.TextInput(
            label=spec.label[:MAX_TITLE_LENGTH],
            custom_id=spec.custom_id,
            style=TEXT_STYLES[spec.style],
            placeholder=truncate_for_display(spec.placeholder) or None,
            required=spec.required,
            min_length=spec.min_length or None,
            max_length=spec.max_length or None,
        ))
    return modal


def build_continue_view(button: ContinueButton) -> discord.ui.View:
    view = discord.ui.View()
    view.add_item(discord.ui.Button(
        style=discord.ButtonStyle.primary,
        label=button.label,
        custom_id=button.custom_id,
    ))
    return view


def extract_modal_values(data: Mapping[str, Any]) -> Dict[str, str]:
    """
    Collect text input values from a modal submit payload.

    Inputs arrive inside action rows (`components`) or, for labelled
    layouts, as a single wrapped `component`.
    """
    values: Dict[str, str] = {}

    def visit(component: Mapping[str, Any]) -> None:
        if "custom_id" in component and "value" in component:
            values[component["custom_id"]] = str(component["value"] or "")
        for child in component.get("components", []):
            visit(child)
        child = component.get("component")
        if child:
            visit(child)

    for row in data.get("components", []):
        visit(row)
    return values


def _extract_options(data: Mapping[str, Any]) -> Tuple[Dict[str, str], Optional[str]]:
    options: Dict[str, str] = {}
    focused: Optional[str] = None
    for option in data.get("options", []):
        if "value" in option:
            options[option["name"]] = str(option["value"])
        if option.get("focused"):
            focused = option["name"]
    return options, focused


def event_from_interaction(interaction: discord.Interaction) -> Optional[InteractionEvent]:
    """Translate a discord.py interaction, or None for kinds the bot ignores."""
    kind = INTERACTION_KINDS.get(interaction.type)
    if kind is None:
        return None

    data: Mapping[str, Any] = interaction.data or {}
    event = InteractionEvent(
        kind=kind,
        channel_id=str(interaction.channel_id or ""),
        user_id=str(interaction.user.id),
        username=interaction.user.name,
    )

    if kind in (InteractionKind.COMMAND, InteractionKind.AUTOCOMPLETE):
        event.name = data.get("name", "")
        event.options, event.focused = _extract_options(data)
    elif kind is InteractionKind.MODAL_SUBMIT:
        event.custom_id = data.get("custom_id", "")
        event.values = extract_modal_values(data)
    else:
        event.custom_id = data.get("custom_id", "")

    return event


class DiscordResponder:
    """Responder over a `discord.Interaction`."""

    def __init__(self, interaction: discord.Interaction) -> None:
        self.interaction = interaction

    async def send_message(
        self,
        content: str,
        ephemeral: bool = False,
        button: Optional[ContinueButton] = None,
    ) -> None:
        kwargs: Dict[str, Any] = {"ephemeral": ephemeral}
        if button is not None:
            kwargs["view"] = build_continue_view(button)
        try:
            await self.interaction.response.send_message(content, **kwargs)
        except discord.HTTPException as e:
            raise DiscordAPIError(
                "Failed to send interaction response",
                context={"content_length": len(content)},
                original_error=e,
            )

    async def send_modal(self, form: ModalForm) -> None:
        try:
            await self.interaction.response.send_modal(build_modal(form))
        except discord.HTTPException as e:
            raise DiscordAPIError(
                "Failed to send modal",
                context={"custom_id": form.custom_id, "field_count": len(form.fields)},
                original_error=e,
            )

    async def send_autocomplete(self, choices: Sequence[str]) -> None:
        options: List[app_commands.Choice[str]] = [
            app_commands.Choice(name=choice, value=choice) for choice in choices
        ]
        await self.interaction.response.autocomplete(options)

    async def defer(self) -> None:
        await self.interaction.response.defer(thinking=True)

    async def edit_original(self, content: str) -> None:
        try:
            await self.interaction.edit_original_response(content=content)
        except discord.HTTPException as e:
            raise DiscordAPIError(
                "Failed to edit interaction response",
                context={"content_length": len(content)},
                original_error=e,
            )
