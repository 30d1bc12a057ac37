"""Tests for modal configuration loading and issue template conversion."""

import pytest

from discord_github_bot.modals.models import InputStyle
from discord_github_bot.modals.registry import ModalRegistry, load_modals_file
from discord_github_bot.modals.templates import TemplateURL, convert_element, parse_template
from discord_github_bot.utils.exceptions import (
    ConfigurationError,
    ModalNotConfiguredError,
    TemplateFetchError,
)


MODALS_YAML = """
config:
  - command: bug
    channel_id: [1001, "1002"]
    title: Bug Report
    template_url: https://github.com/org/app/blob/main/.github/ISSUE_TEMPLATE/bug.yml
  - command: feature
    channel_id: 1001
    title: Feature Request
    owner: other-org
    repo: tools
    labels: [from-discord, idea]
    fields:
      - custom_id: feature_title
        label: Title
        required: true
      - custom_id: feature_description
        label: Description
        style: paragraph
"""


@pytest.fixture
def modals_path(tmp_path):
    path = tmp_path / "modals.yaml"
    path.write_text(MODALS_YAML)
    return path


class TestLoadModalsFile:
    """Test reading the YAML modal configuration."""

    def test_channel_ids_are_strings(self, modals_path):
        modals = load_modals_file(modals_path)

        assert modals[0].channel_id == ["1001", "1002"]
        assert modals[1].channel_id == ["1001"]
        assert modals[1].fields[1].style == InputStyle.PARAGRAPH

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_modals_file(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("config: [unclosed")

        with pytest.raises(ConfigurationError):
            load_modals_file(path)

    def test_bad_template_url(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("config:\n  - command: bug\n    title: Bug\n    template_url: https://github.com/\n")

        with pytest.raises(ConfigurationError):
            load_modals_file(path)


class TestModalRegistry:
    """Test resolving (command, channel) pairs."""

    @pytest.mark.asyncio
    async def test_explicit_fields(self, modals_path):
        registry = ModalRegistry.from_file(modals_path)

        definition = await registry.resolve("feature", "1001")

        assert definition.title == "Feature Request"
        assert [f.custom_id for f in definition.fields] == ["feature_title", "feature_description"]
        assert (definition.owner, definition.repo) == ("other-org", "tools")
        assert definition.labels == ("from-discord", "idea")

    @pytest.mark.asyncio
    async def test_unknown_channel(self, modals_path):
        registry = ModalRegistry.from_file(modals_path)

        with pytest.raises(ModalNotConfiguredError):
            await registry.resolve("feature", "1002")

    @pytest.mark.asyncio
    async def test_template_without_fetcher(self, modals_path):
        registry = ModalRegistry.from_file(modals_path)

        with pytest.raises(TemplateFetchError):
            await registry.resolve("bug", "1001")

    @pytest.mark.asyncio
    async def test_template_fields_are_cached(self, modals_path):
        fetched = []

        async def fetch_text(url):
            fetched.append(url)
            return "body:\n  - type: input\n    id: version\n    attributes:\n      label: Version\n"

        registry = ModalRegistry.from_file(modals_path, fetch_text=fetch_text)

        first = await registry.resolve("bug", "1001")
        second = await registry.resolve("bug", "1002")

        assert fetched == ["https://raw.githubusercontent.com/org/app/main/.github/ISSUE_TEMPLATE/bug.yml"]
        assert first.fields == second.fields
        assert (first.owner, first.repo) == ("org", "app")
        assert first.labels == ("from-discord", "bug")

    def test_default_target(self, modals_path):
        assert ModalRegistry.from_file(modals_path).default_target() == ("org", "app")
        explicit = ModalRegistry.from_file(modals_path, default_owner="acme", default_repo="site")
        assert explicit.default_target() == ("acme", "site")
        assert ModalRegistry([]).default_target() == ("", "")


class TestTemplates:
    """Test GitHub issue template handling."""

    def test_parse_url(self):
        url = TemplateURL.parse("https://github.com/org/app/blob/main/.github/ISSUE_TEMPLATE/bug.yml")

        assert (url.owner, url.repo) == ("org", "app")
        assert url.raw_url == "https://raw.githubusercontent.com/org/app/main/.github/ISSUE_TEMPLATE/bug.yml"
        assert url.issue_api_url == "https://api.github.com/repos/org/app/issues"

    @pytest.mark.parametrize("bad", ["", "https://github.com/", "https://github.com/org"])
    def test_invalid_url(self, bad):
        with pytest.raises(ConfigurationError):
            TemplateURL.parse(bad)

    def test_element_conversion(self):
        textarea = convert_element({
            "type": "textarea",
            "id": "steps",
            "attributes": {"label": "Steps", "placeholder": "1. ..."},
            "validations": {"required": True},
        })
        short = convert_element({"type": "input", "id": "version", "attributes": {"label": "Version"}})
        dropdown = convert_element({"type": "dropdown", "id": "os", "attributes": {"label": "OS"}})

        assert textarea.style == InputStyle.PARAGRAPH
        assert (textarea.min_length, textarea.max_length) == (1, 4000)
        assert textarea.required
        assert short.style == InputStyle.SHORT
        assert (short.min_length, short.max_length) == (1, 100)
        assert (dropdown.min_length, dropdown.max_length) == (None, None)

    def test_informational_elements_are_skipped(self):
        assert convert_element({"type": "markdown", "attributes": {"value": "hi"}}) is None
        assert convert_element({"type": "checkboxes", "attributes": {"label": "ok"}}) is None

    def test_invalid_template_yaml(self):
        with pytest.raises(TemplateFetchError):
            parse_template("- just\n- a list\n")
        with pytest.raises(TemplateFetchError):
            parse_template("body: [unclosed")
