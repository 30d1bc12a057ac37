"""
Modal configuration: which form a command shows in which channel.

The configuration file is YAML with a top-level `config` list:

```yaml
config:
  - command: bug
    channel_id: ["1234567890"]
    title: Bug Report
    template_url: https://github.com/org/app/blob/main/.github/ISSUE_TEMPLATE/bug.yml
  - command: feature
    channel_id: ["1234567890"]
    title: Feature Request
    owner: org
    repo: app
    fields:
      - custom_id: feature_title
        label: Title
        style: short
        required: true
```
"""

from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from discord_github_bot.cache import KeyedTTLCache
from discord_github_bot.modals.models import FieldSpec, ModalDefinition
from discord_github_bot.modals.templates import TemplateURL, parse_template, template_fields
from discord_github_bot.utils.exceptions import (
    ConfigurationError,
    ModalNotConfiguredError,
    TemplateFetchError,
)
from discord_github_bot.utils.logging import get_logger


BASE_LABEL = "from-discord"

DEFAULT_LABELS = {
    "bug": (BASE_LABEL, "bug"),
    "feature": (BASE_LABEL, "enhancement"),
}

FetchText = Callable[[str], Awaitable[str]]


class ModalConfig(BaseModel):
    """One entry of the modal configuration file."""

    command: str
    channel_id: List[str] = Field(default_factory=list)
    title: str
    template_url: Optional[str] = None
    fields: List[FieldSpec] = Field(default_factory=list)
    owner: Optional[str] = None
    repo: Optional[str] = None
    labels: Optional[List[str]] = None

    @field_validator("channel_id", mode="before")
    @classmethod
    def coerce_channel_ids(cls, v):
        """Accept a single id and numeric ids as written in YAML."""
        if v is None:
            return []
        if not isinstance(v, list):
            v = [v]
        return [str(item) for item in v]

    @property
    def parsed_template_url(self) -> Optional[TemplateURL]:
        if not self.template_url:
            return None
        return TemplateURL.parse(self.template_url)


class ModalsFile(BaseModel):
    modals: List[ModalConfig] = Field(default_factory=list, alias="config")


def load_modals_file(path: Path) -> List[ModalConfig]:
    """
    Read and validate the modal configuration file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            "Failed to read modal config file",
            context={"path": str(path)},
            original_error=e,
        )

    try:
        data = yaml.safe_load(raw) or {}
        modals = ModalsFile.model_validate(data).modals
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(
            "Failed to parse modal config",
            context={"path": str(path)},
            original_error=e,
        )

    # Surface bad template URLs at startup rather than on first use.
    for modal in modals:
        if modal.template_url:
            try:
                modal.parsed_template_url
            except ConfigurationError as e:
                raise ConfigurationError(
                    f"Failed to parse template URL for command {modal.command}",
                    context={"command": modal.command},
                    original_error=e,
                )
    return modals


class ModalRegistry:
    """
    Resolves (command, channel) to the form to show.

    Template-backed forms are fetched through `fetch_text` and cached, so
    a burst of /bug invocations costs one template download per TTL.
    """

    def __init__(
        self,
        modals: List[ModalConfig],
        fetch_text: Optional[FetchText] = None,
        template_ttl: float = 600,
        default_owner: Optional[str] = None,
        default_repo: Optional[str] = None,
    ) -> None:
        self.modals = list(modals)
        self.fetch_text = fetch_text
        self.templates: KeyedTTLCache[Tuple[FieldSpec, ...]] = KeyedTTLCache(
            template_ttl, name="templates"
        )
        self._default_owner = default_owner
        self._default_repo = default_repo
        self.logger = get_logger(__name__)

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> "ModalRegistry":
        return cls(load_modals_file(path), **kwargs)

    def find(self, command: str, channel_id: str) -> Optional[ModalConfig]:
        for modal in self.modals:
            if modal.command == command and str(channel_id) in modal.channel_id:
                return modal
        return None

    def default_target(self) -> Tuple[str, str]:
        """
        Repository used by commands that have no modal of their own.

        Explicit defaults win; otherwise the first modal with a known
        target is used. Returns empty strings when nothing is known.
        """
        owner, repo = self._default_owner, self._default_repo
        if owner and repo:
            return owner, repo

        for modal in self.modals:
            target_owner, target_repo = self._modal_target(modal)
            if target_owner and target_repo:
                return owner or target_owner, repo or target_repo
        return owner or "", repo or ""

    def _modal_target(self, modal: ModalConfig) -> Tuple[str, str]:
        template = modal.parsed_template_url
        if template is not None:
            return template.owner, template.repo
        return modal.owner or "", modal.repo or ""

    async def _template_fields(self, template: TemplateURL) -> Tuple[FieldSpec, ...]:
        if self.fetch_text is None:
            raise TemplateFetchError(
                "No template fetcher configured",
                context={"url": template.raw_url},
            )

        async def fetch() -> Tuple[FieldSpec, ...]:
            try:
                text = await self.fetch_text(template.raw_url)
            except TemplateFetchError:
                raise
            except Exception as e:
                raise TemplateFetchError(
                    "Failed to fetch template",
                    context={"url": template.raw_url},
                    original_error=e,
                )
            parsed = parse_template(text, source=template.raw_url)
            return tuple(template_fields(parsed))

        return await self.templates.get_or_fetch(template.raw_url, fetch)

    async def resolve(self, command: str, channel_id: str) -> ModalDefinition:
        """
        Return the form for `command` in `channel_id`.

        Raises:
            ModalNotConfiguredError: If no modal maps this command to this channel
            TemplateFetchError: If the modal's template cannot be loaded
        """
        modal = self.find(command, channel_id)
        if modal is None:
            raise ModalNotConfiguredError(
                f"No modal configured for command '{command}' in channel '{channel_id}'",
                context={"command": command, "channel_id": channel_id},
            )

        template = modal.parsed_template_url
        if template is not None:
            fields = await self._template_fields(template)
        else:
            fields = tuple(modal.fields)

        owner, repo = self._modal_target(modal)
        if not owner or not repo:
            default_owner, default_repo = self.default_target()
            owner = owner or default_owner
            repo = repo or default_repo

        if modal.labels is not None:
            labels = tuple(modal.labels)
        else:
            labels = DEFAULT_LABELS.get(command, (BASE_LABEL,))

        return ModalDefinition(
            command=command,
            title=modal.title,
            fields=fields,
            owner=owner,
            repo=repo,
            labels=labels,
        )
