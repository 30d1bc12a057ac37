"""Tests for interaction routing and the multi-part form flow."""

import pytest

from discord_github_bot.bot.handlers import (
    HELP_TEXT,
    ISSUE_CONFIG_ERROR,
    ISSUE_FAILED,
    SESSION_EXPIRED,
    not_configured_message,
)
from conftest import (
    CHANNEL_ID,
    USER_ID,
    button_event,
    command_event,
    modal_event,
)


SESSION_KEY = f"bug_{CHANNEL_ID}_{USER_ID}"


def page_values(form):
    return {spec.custom_id: f"answer to {spec.label}" for spec in form.fields}


class TestMultiPartFlow:
    """Test a seven-field bug report from command to created issue."""

    @pytest.mark.asyncio
    async def test_full_flow(self, router, store, github, responder):
        # /bug opens page one and creates the session
        await router.dispatch(command_event("bug"), responder)

        assert len(responder.modals) == 1
        first = responder.modals[0]
        assert first.custom_id == f"modal_bug_{CHANNEL_ID}"
        assert first.title == "Bug Report"
        assert len(first.fields) == 5
        assert store.get(SESSION_KEY) is not None

        # Submitting page one asks the user to continue
        await router.dispatch(modal_event(first.custom_id, page_values(first)), responder)

        progress = responder.messages[-1]
        assert progress["content"] == "Part 1 of 2 complete. Click 'Continue' to proceed."
        assert progress["ephemeral"]
        assert progress["button"].custom_id == f"continue_{SESSION_KEY}"
        assert progress["button"].label == "Continue"
        assert len(store.get(SESSION_KEY).collected) == 5

        # Continue opens page two with the remaining fields
        await router.dispatch(button_event(progress["button"].custom_id), responder)

        second = responder.modals[-1]
        assert second.custom_id == f"modal_continue_{SESSION_KEY}"
        assert [spec.custom_id for spec in second.fields] == ["bug_6", "bug_7"]

        # Submitting page two files the issue
        await router.dispatch(modal_event(second.custom_id, page_values(second)), responder)

        assert github.calls["create_issue"] == 1
        issue = github.created[0]
        assert issue["owner"] == "org"
        assert issue["repo"] == "app"
        assert issue["title"] == "Bug Report"
        assert issue["labels"] == ["from-discord", "bug"]
        assert issue["body"].count("### ") == 7
        assert issue["body"].index("### Question 1") < issue["body"].index("### Question 7")
        assert issue["body"].endswith(f"Submitted via Discord by: octocat ({USER_ID})")

        done = responder.last_message
        assert done.startswith("✅ Issue #101 created successfully!\nhttps://github.com/org/app/issues/101")
        assert "**Note:** You can use Markdown formatting" in done
        assert store.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_issue_failure_deletes_session(self, router, store, github, responder):
        github.fail_create = True
        await router.dispatch(command_event("bug"), responder)
        first = responder.modals[0]
        await router.dispatch(modal_event(first.custom_id, page_values(first)), responder)
        await router.dispatch(button_event(f"continue_{SESSION_KEY}"), responder)
        second = responder.modals[-1]

        await router.dispatch(modal_event(second.custom_id, page_values(second)), responder)

        assert responder.last_message == ISSUE_FAILED
        assert store.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_unknown_fields_do_not_complete_session(self, router, store, github, responder):
        await router.dispatch(command_event("bug"), responder)
        first = responder.modals[0]
        values = page_values(first)
        values.update({"stray_1": "x", "stray_2": "y"})

        await router.dispatch(modal_event(first.custom_id, values), responder)

        session = store.get(SESSION_KEY)
        assert len(session.collected) == 5
        assert "stray_1" not in session.collected
        assert github.calls["create_issue"] == 0
        assert responder.last_message.startswith("Part 1 of 2 complete.")

    @pytest.mark.asyncio
    async def test_restarting_replaces_session(self, router, store, responder):
        await router.dispatch(command_event("bug"), responder)
        first = responder.modals[0]
        await router.dispatch(modal_event(first.custom_id, page_values(first)), responder)

        await router.dispatch(command_event("bug"), responder)

        assert store.get(SESSION_KEY).collected == {}


class TestMissingSessions:
    """Test interactions that refer to sessions that no longer exist."""

    @pytest.mark.asyncio
    async def test_continue_button_without_session(self, router, github, responder):
        await router.dispatch(button_event("continue_bug_1001_999"), responder)

        assert responder.last_message == SESSION_EXPIRED
        assert responder.messages[-1]["ephemeral"]
        assert responder.modals == []
        assert sum(github.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_continuation_submit_without_session(self, router, github, responder):
        await router.dispatch(
            modal_event("modal_continue_bug_1001_999", {"bug_6": "x"}),
            responder,
        )

        assert responder.last_message == SESSION_EXPIRED
        assert github.calls["create_issue"] == 0


class TestRouting:
    """Test dispatch edge cases."""

    @pytest.mark.asyncio
    async def test_malformed_modal_id_is_dropped(self, router, github, responder):
        await router.dispatch(modal_event("garbage", {"x": "y"}), responder)

        assert responder.nothing_sent
        assert sum(github.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_unknown_command_is_ignored(self, router, responder):
        await router.dispatch(command_event("dance"), responder)

        assert responder.nothing_sent

    @pytest.mark.asyncio
    async def test_unrelated_component_is_ignored(self, router, responder):
        await router.dispatch(button_event("vote_up"), responder)

        assert responder.nothing_sent

    @pytest.mark.asyncio
    async def test_handler_errors_do_not_escape(self, router, handlers, responder):
        async def explode(event, responder):
            raise RuntimeError("boom")

        router.command_handlers["tapsign"] = explode

        await router.dispatch(command_event("tapsign"), responder)

    @pytest.mark.asyncio
    async def test_tapsign(self, router, responder):
        await router.dispatch(command_event("tapsign"), responder)

        assert responder.last_message == HELP_TEXT
        assert "`/changelog`" in HELP_TEXT


class TestIssueForms:
    """Test /bug and /feature outside the happy multi-page path."""

    @pytest.mark.asyncio
    async def test_not_configured_for_channel(self, router, store, responder):
        await router.dispatch(command_event("bug", channel_id="555"), responder)

        assert responder.last_message == (
            "Sorry, the bug report command is not configured for this channel."
        )
        assert responder.messages[-1]["ephemeral"]
        assert len(store) == 0

    def test_not_configured_message_for_feature(self):
        assert not_configured_message("feature") == (
            "Sorry, the feature request command is not configured for this channel."
        )

    @pytest.mark.asyncio
    async def test_short_form_creates_no_session(self, router, store, responder):
        await router.dispatch(command_event("feature"), responder)

        form = responder.modals[0]
        assert form.custom_id == f"modal_feature_{CHANNEL_ID}"
        assert len(form.fields) == 2
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_single_page_submission(self, router, github, responder):
        await router.dispatch(
            modal_event(
                f"modal_feature_{CHANNEL_ID}",
                {"feature_title": "Dark mode", "feature_description": "Please"},
            ),
            responder,
        )

        issue = github.created[0]
        assert issue["title"] == "Dark mode"
        assert issue["body"].startswith(f"**Reported by:** octocat (ID: {USER_ID})")
        assert "Please" in issue["body"]
        assert issue["labels"] == ["from-discord", "enhancement"]
        assert responder.last_message == (
            "✅ Issue #101 created successfully!\nhttps://github.com/org/app/issues/101"
        )

    @pytest.mark.asyncio
    async def test_single_page_failure(self, router, github, responder):
        github.fail_create = True

        await router.dispatch(
            modal_event(
                f"modal_feature_{CHANNEL_ID}",
                {"feature_title": "Dark mode", "feature_description": "Please"},
            ),
            responder,
        )

        assert responder.last_message == ISSUE_FAILED

    @pytest.mark.asyncio
    async def test_submission_from_unconfigured_channel(self, router, github, responder):
        await router.dispatch(
            modal_event(
                "modal_feature_5555",
                {"feature_title": "Dark mode", "feature_description": "Please"},
                channel_id="5555",
            ),
            responder,
        )

        assert github.created == []
        assert github.calls["create_issue"] == 0
        assert responder.messages == [
            {"content": ISSUE_CONFIG_ERROR, "ephemeral": True, "button": None}
        ]

    @pytest.mark.asyncio
    async def test_continuation_id_without_key(self, router, github, responder):
        await router.dispatch(modal_event("modal_continue", {"a": "b"}), responder)

        assert github.created == []
        assert responder.last_message == ISSUE_CONFIG_ERROR
