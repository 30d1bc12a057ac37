"""Test configuration and utilities."""

from typing import Dict, List, Optional, Sequence

import pytest

from discord_github_bot.bot.handlers import InteractionHandlers
from discord_github_bot.bot.responses import (
    ContinueButton,
    InteractionEvent,
    InteractionKind,
    ModalForm,
)
from discord_github_bot.bot.router import InteractionRouter
from discord_github_bot.cache import KeyedTTLCache, TTLCache
from discord_github_bot.config import AppConfig, DiscordConfig, GitHubConfig, LoggingConfig
from discord_github_bot.faq import FAQCatalog, FAQItem
from discord_github_bot.github.models import (
    CommitComparison,
    ComparisonCommit,
    CreatedIssue,
    Release,
    Repository,
)
from discord_github_bot.modals.models import FieldSpec, InputStyle
from discord_github_bot.modals.registry import ModalConfig, ModalRegistry
from discord_github_bot.modals.session_store import ModalSessionStore
from discord_github_bot.utils.exceptions import GitHubAPIError


CHANNEL_ID = "1001"
USER_ID = "42"
USERNAME = "octocat"


def make_fields(count: int, prefix: str = "field") -> List[FieldSpec]:
    """Fields `{prefix}_1` .. `{prefix}_{count}` labelled "Question N"."""
    return [
        FieldSpec(
            custom_id=f"{prefix}_{i}",
            label=f"Question {i}",
            style=InputStyle.PARAGRAPH if i % 2 else InputStyle.SHORT,
            required=True,
        )
        for i in range(1, count + 1)
    ]


class FakeGitHubClient:
    """In-memory GitHub client with call counters and failure switches."""

    def __init__(self) -> None:
        self.releases: List[Release] = [
            Release(tag_name="v1.2.0"),
            Release(tag_name="v1.1.0"),
            Release(tag_name="v1.0.0"),
        ]
        self.repositories: Dict[str, Repository] = {
            "app": Repository(full_name="org/app", html_url="https://github.com/org/app"),
        }
        self.created: List[dict] = []
        self.calls: Dict[str, int] = {
            "list_releases": 0,
            "compare_commits": 0,
            "create_issue": 0,
            "get_repository": 0,
            "fetch_text": 0,
        }
        self.fail_create = False
        self.fail_releases = False
        self.fail_compare = False
        self.templates: Dict[str, str] = {}
        self.next_issue_number = 101

    async def list_releases(self, owner: str, repo: str, limit: int) -> List[Release]:
        self.calls["list_releases"] += 1
        if self.fail_releases:
            raise GitHubAPIError("releases unavailable")
        return self.releases[:limit]

    async def compare_commits(self, owner: str, repo: str, base: str, head: str) -> CommitComparison:
        self.calls["compare_commits"] += 1
        if self.fail_compare:
            raise GitHubAPIError("compare failed", context={"base": base, "head": head})
        return CommitComparison(
            total_commits=1,
            html_url=f"https://github.com/{owner}/{repo}/compare/{base}...{head}",
            commits=[
                ComparisonCommit(
                    sha="abcdef1234567",
                    html_url=f"https://github.com/{owner}/{repo}/commit/abcdef1",
                    message="Fix crash on launch\n\nDetails",
                    author="octocat",
                )
            ],
        )

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: Sequence[str],
    ) -> CreatedIssue:
        self.calls["create_issue"] += 1
        if self.fail_create:
            raise GitHubAPIError("issue creation failed", context={"status": 500})
        number = self.next_issue_number
        self.next_issue_number += 1
        self.created.append({
            "owner": owner,
            "repo": repo,
            "title": title,
            "body": body,
            "labels": list(labels),
        })
        return CreatedIssue(
            number=number,
            html_url=f"https://github.com/{owner}/{repo}/issues/{number}",
        )

    async def get_repository(self, owner: str, repo: str) -> Repository:
        self.calls["get_repository"] += 1
        if repo not in self.repositories:
            raise GitHubAPIError("not found", context={"status": 404})
        return self.repositories[repo]

    async def fetch_text(self, url: str) -> str:
        self.calls["fetch_text"] += 1
        if url not in self.templates:
            raise GitHubAPIError("not found", context={"url": url, "status": 404})
        return self.templates[url]


class RecordingResponder:
    """Responder that records everything the handlers send."""

    def __init__(self) -> None:
        self.messages: List[dict] = []
        self.modals: List[ModalForm] = []
        self.autocompletes: List[List[str]] = []
        self.edits: List[str] = []
        self.deferred = False

    async def send_message(
        self,
        content: str,
        ephemeral: bool = False,
        button: Optional[ContinueButton] = None,
    ) -> None:
        self.messages.append({"content": content, "ephemeral": ephemeral, "button": button})

    async def send_modal(self, form: ModalForm) -> None:
        self.modals.append(form)

    async def send_autocomplete(self, choices: Sequence[str]) -> None:
        self.autocompletes.append(list(choices))

    async def defer(self) -> None:
        self.deferred = True

    async def edit_original(self, content: str) -> None:
        self.edits.append(content)

    @property
    def last_message(self) -> Optional[str]:
        return self.messages[-1]["content"] if self.messages else None

    @property
    def nothing_sent(self) -> bool:
        return not (self.messages or self.modals or self.autocompletes or self.edits)


def command_event(command: str, channel_id: str = CHANNEL_ID, **options: str) -> InteractionEvent:
    return InteractionEvent(
        kind=InteractionKind.COMMAND,
        channel_id=channel_id,
        user_id=USER_ID,
        username=USERNAME,
        name=command,
        options=dict(options),
    )


def autocomplete_event(name: str, focused: str, value: str, **options: str) -> InteractionEvent:
    all_options = dict(options)
    all_options[focused] = value
    return InteractionEvent(
        kind=InteractionKind.AUTOCOMPLETE,
        channel_id=CHANNEL_ID,
        user_id=USER_ID,
        username=USERNAME,
        name=name,
        options=all_options,
        focused=focused,
    )


def modal_event(custom_id: str, values: Dict[str, str], channel_id: str = CHANNEL_ID) -> InteractionEvent:
    return InteractionEvent(
        kind=InteractionKind.MODAL_SUBMIT,
        channel_id=channel_id,
        user_id=USER_ID,
        username=USERNAME,
        custom_id=custom_id,
        values=dict(values),
    )


def button_event(custom_id: str, channel_id: str = CHANNEL_ID) -> InteractionEvent:
    return InteractionEvent(
        kind=InteractionKind.COMPONENT,
        channel_id=channel_id,
        user_id=USER_ID,
        username=USERNAME,
        custom_id=custom_id,
    )


@pytest.fixture
def test_config() -> AppConfig:
    """Create a test configuration."""
    config = AppConfig()

    config.config_path = "modals.yaml"
    config.discord = DiscordConfig(token="test_token_" + "x" * 50, server_id="999")
    config.github = GitHubConfig(token="ghp_test", owner="org", repo="app")
    config.logging = LoggingConfig(level="DEBUG", format="text")

    return config


@pytest.fixture
def github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def store() -> ModalSessionStore:
    return ModalSessionStore()


@pytest.fixture
def modal_configs() -> List[ModalConfig]:
    return [
        ModalConfig(
            command="bug",
            channel_id=[CHANNEL_ID],
            title="Bug Report",
            owner="org",
            repo="app",
            fields=make_fields(7, prefix="bug"),
        ),
        ModalConfig(
            command="feature",
            channel_id=[CHANNEL_ID],
            title="Feature Request",
            owner="org",
            repo="app",
            fields=[
                FieldSpec(custom_id="feature_title", label="Title", required=True),
                FieldSpec(
                    custom_id="feature_description",
                    label="Description",
                    style=InputStyle.PARAGRAPH,
                    required=True,
                ),
            ],
        ),
    ]


@pytest.fixture
def registry(modal_configs: List[ModalConfig], github: FakeGitHubClient) -> ModalRegistry:
    return ModalRegistry(modal_configs, fetch_text=github.fetch_text)


@pytest.fixture
def faq_catalog() -> FAQCatalog:
    return FAQCatalog(
        faq=[
            FAQItem(name="Getting started", url="https://example.org/start"),
            FAQItem(name="Resetting the device", url="https://example.org/reset"),
        ],
        software_modules=[
            FAQItem(name="Range test", url="https://example.org/range-test"),
        ],
    )


@pytest.fixture
def handlers(
    store: ModalSessionStore,
    registry: ModalRegistry,
    github: FakeGitHubClient,
    faq_catalog: FAQCatalog,
) -> InteractionHandlers:
    return InteractionHandlers(
        store=store,
        registry=registry,
        github=github,
        releases=TTLCache(3600, name="releases"),
        comparisons=KeyedTTLCache(3600, name="comparisons"),
        faq=faq_catalog,
    )


@pytest.fixture
def router(store: ModalSessionStore, handlers: InteractionHandlers) -> InteractionRouter:
    return InteractionRouter(store, handlers)


@pytest.fixture
def responder() -> RecordingResponder:
    return RecordingResponder()
