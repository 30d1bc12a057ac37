"""
Data models for configured modals and in-progress multi-part submissions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Discord modals accept at most five text inputs.
MAX_FIELDS_PER_PAGE = 5

MODAL_PREFIX = "modal"
CONTINUE_PREFIX = "continue"


class InputStyle(str, Enum):
    """Text input style for a modal field."""
    SHORT = "short"
    PARAGRAPH = "paragraph"


class FieldSpec(BaseModel):
    """
    A single text input of an issue form.

    Attributes:
        custom_id: Identifier submitted back by Discord
        label: Display label, also the heading in the issue body
        style: Short (single line) or paragraph input
        placeholder: Hint text, truncated to 100 characters when rendered
        required: Whether Discord enforces a value
        min_length: Optional minimum length
        max_length: Optional maximum length
    """

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    custom_id: str = Field(description="Identifier submitted back by Discord")
    label: str = Field(description="Display label")
    style: InputStyle = Field(default=InputStyle.SHORT)
    placeholder: str = Field(default="")
    required: bool = Field(default=False)
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)


@dataclass(frozen=True)
class ModalDefinition:
    """What the modal configuration says about one (command, channel) pair."""

    command: str
    title: str
    fields: Tuple[FieldSpec, ...]
    owner: str
    repo: str
    labels: Tuple[str, ...] = ()


@dataclass
class ModalSession:
    """
    State of one user's multi-part issue submission.

    `fields` is fixed for the lifetime of the session and its order is the
    page order. `collected` maps display labels to submitted values and never
    holds more entries than there are fields.
    """

    session_key: str
    title: str
    fields: Tuple[FieldSpec, ...]
    owner: str
    repo: str
    labels: List[str] = field(default_factory=list)
    command: str = ""
    channel_id: str = ""
    collected: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_definition(
        cls,
        session_key: str,
        definition: ModalDefinition,
        channel_id: str,
    ) -> "ModalSession":
        return cls(
            session_key=session_key,
            title=definition.title,
            fields=tuple(definition.fields),
            owner=definition.owner,
            repo=definition.repo,
            labels=list(definition.labels),
            command=definition.command,
            channel_id=channel_id,
        )


def session_key(command: str, channel_id: str, user_id: str) -> str:
    """Build the session key `{command}_{channel}_{user}`."""
    return f"{command}_{channel_id}_{user_id}"


def modal_custom_id(command: str, channel_id: str) -> str:
    """Custom id of the first page form: `modal_{command}_{channel}`."""
    return f"{MODAL_PREFIX}_{command}_{channel_id}"


def continuation_modal_custom_id(key: str) -> str:
    """Custom id of a follow-up page form: `modal_continue_{key}`."""
    return f"{MODAL_PREFIX}_{CONTINUE_PREFIX}_{key}"


def continue_button_custom_id(key: str) -> str:
    """Custom id of the Continue button: `continue_{key}`."""
    return f"{CONTINUE_PREFIX}_{key}"
