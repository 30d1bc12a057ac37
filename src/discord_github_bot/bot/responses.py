"""
Platform-neutral interaction events and responses.

Handlers receive an `InteractionEvent` and answer through a `Responder`;
neither knows about discord.py. `bot/responder.py` adapts both to
`discord.Interaction`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Protocol, Sequence, Tuple

from discord_github_bot.modals.models import FieldSpec


class InteractionKind(str, Enum):
    COMMAND = "command"
    AUTOCOMPLETE = "autocomplete"
    MODAL_SUBMIT = "modal_submit"
    COMPONENT = "component"


@dataclass
class InteractionEvent:
    """
    One inbound interaction.

    Attributes:
        kind: What the user did
        channel_id: Channel the interaction happened in
        user_id: Discord user id of the actor
        username: Discord username of the actor
        name: Command name (commands and autocomplete)
        custom_id: Form or button identifier (modal submits and components)
        options: Command option values by option name
        focused: Option being typed into (autocomplete)
        values: Submitted form values by field custom id
    """

    kind: InteractionKind
    channel_id: str
    user_id: str
    username: str
    name: str = ""
    custom_id: str = ""
    options: Dict[str, str] = field(default_factory=dict)
    focused: Optional[str] = None
    values: Dict[str, str] = field(default_factory=dict)

    @property
    def focused_value(self) -> str:
        if self.focused is None:
            return ""
        return self.options.get(self.focused, "")


@dataclass(frozen=True)
class ModalForm:
    """A modal page to show: at most five text inputs."""

    custom_id: str
    title: str
    fields: Tuple[FieldSpec, ...]


@dataclass(frozen=True)
class ContinueButton:
    """The button that opens the next page of a multi-part form."""

    custom_id: str
    label: str = "Continue"


class Responder(Protocol):
    """How handlers answer an interaction."""

    async def send_message(
        self,
        content: str,
        ephemeral: bool = False,
        button: Optional[ContinueButton] = None,
    ) -> None:
        ...

    async def send_modal(self, form: ModalForm) -> None:
        ...

    async def send_autocomplete(self, choices: Sequence[str]) -> None:
        ...

    async def defer(self) -> None:
        ...

    async def edit_original(self, content: str) -> None:
        ...
