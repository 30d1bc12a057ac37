"""
GitHub issue-form templates as a source of modal fields.

A modal can point at an issue form in a repository, e.g.
https://github.com/org/repo/blob/main/.github/ISSUE_TEMPLATE/bug.yml, instead
of listing its fields. The template is fetched from raw.githubusercontent.com
and its interactive elements become modal fields.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from discord_github_bot.modals.models import FieldSpec, InputStyle
from discord_github_bot.utils.exceptions import ConfigurationError, TemplateFetchError


# Informational elements with no text value to collect.
SKIPPED_ELEMENT_TYPES = {"markdown", "checkboxes"}

# (min_length, max_length) per element type
LENGTH_BOUNDS = {
    "input": (1, 100),
    "textarea": (1, 4000),
}


@dataclass(frozen=True)
class TemplateURL:
    """A parsed GitHub issue template URL."""

    original: str
    owner: str
    repo: str
    path: str

    @classmethod
    def parse(cls, template_url: str) -> "TemplateURL":
        """
        Parse a github.com template URL.

        Raises:
            ConfigurationError: If the URL is empty or has no owner/repo
        """
        if not template_url:
            raise ConfigurationError("Template URL cannot be empty")

        url = template_url
        for prefix in ("https://", "http://", "github.com/"):
            if url.startswith(prefix):
                url = url[len(prefix):]

        parts = url.split("/")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ConfigurationError(
                f"Invalid GitHub URL format: {template_url}",
                context={"url": template_url},
            )

        return cls(
            original=template_url,
            owner=parts[0],
            repo=parts[1],
            path="/".join(parts[2:]),
        )

    @property
    def raw_url(self) -> str:
        """URL of the raw template YAML."""
        path = self.path.replace("blob/", "", 1)
        return f"https://raw.githubusercontent.com/{self.owner}/{self.repo}/{path}"

    @property
    def issue_api_url(self) -> str:
        return f"https://api.github.com/repos/{self.owner}/{self.repo}/issues"

    def __str__(self) -> str:
        return self.original


def parse_template(text: str, source: str = "") -> Dict[str, Any]:
    """
    Parse issue template YAML.

    Raises:
        TemplateFetchError: If the YAML is invalid or not a mapping
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TemplateFetchError(
            "Failed to parse template YAML",
            context={"source": source},
            original_error=e,
        )

    if not isinstance(data, dict):
        raise TemplateFetchError(
            "Template YAML must be a mapping",
            context={"source": source},
        )
    return data


def convert_element(element: Dict[str, Any]) -> Optional[FieldSpec]:
    """
    Convert one issue-form body element into a modal field.

    Returns:
        The field, or None for informational elements
    """
    element_type = element.get("type", "")
    if element_type in SKIPPED_ELEMENT_TYPES:
        return None

    attributes = element.get("attributes") or {}
    validations = element.get("validations") or {}
    min_length, max_length = LENGTH_BOUNDS.get(element_type, (None, None))

    return FieldSpec(
        custom_id=str(element.get("id") or attributes.get("label", "")),
        label=str(attributes.get("label", "")),
        style=InputStyle.PARAGRAPH if element_type == "textarea" else InputStyle.SHORT,
        placeholder=str(attributes.get("placeholder") or ""),
        required=bool(validations.get("required", False)),
        min_length=min_length,
        max_length=max_length,
    )


def template_fields(template: Dict[str, Any]) -> List[FieldSpec]:
    """All interactive fields of a parsed template, in template order."""
    fields = []
    for element in template.get("body") or []:
        if not isinstance(element, dict):
            continue
        spec = convert_element(element)
        if spec is not None:
            fields.append(spec)
    return fields
