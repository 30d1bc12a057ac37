"""Tests for the in-progress session registry."""

import threading

from discord_github_bot.modals.models import (
    ModalDefinition,
    ModalSession,
    continuation_modal_custom_id,
    continue_button_custom_id,
    modal_custom_id,
    session_key,
)
from discord_github_bot.modals.session_store import ModalSessionStore
from conftest import make_fields


def make_session(key: str) -> ModalSession:
    definition = ModalDefinition(
        command="bug",
        title="Bug Report",
        fields=tuple(make_fields(7)),
        owner="org",
        repo="app",
        labels=("from-discord", "bug"),
    )
    return ModalSession.from_definition(key, definition, channel_id="1001")


def test_identifier_formats():
    key = session_key("bug", "1001", "42")

    assert key == "bug_1001_42"
    assert modal_custom_id("bug", "1001") == "modal_bug_1001"
    assert continuation_modal_custom_id(key) == "modal_continue_bug_1001_42"
    assert continue_button_custom_id(key) == "continue_bug_1001_42"


def test_create_get_delete():
    store = ModalSessionStore()
    session = make_session("bug_1001_42")

    store.create("bug_1001_42", session)
    assert store.get("bug_1001_42") is session
    assert "bug_1001_42" in store
    assert len(store) == 1

    assert store.delete("bug_1001_42")
    assert store.get("bug_1001_42") is None
    assert not store.delete("bug_1001_42")


def test_missing_key_is_not_an_error():
    assert ModalSessionStore().get("nobody") is None


def test_create_replaces_existing_session():
    store = ModalSessionStore()
    first = make_session("bug_1001_42")
    first.collected["Question 1"] = "old"
    store.create("bug_1001_42", first)

    second = make_session("bug_1001_42")
    store.create("bug_1001_42", second)

    assert store.get("bug_1001_42") is second
    assert store.get("bug_1001_42").collected == {}


def test_session_copies_definition():
    session = make_session("bug_1001_42")

    assert session.title == "Bug Report"
    assert session.labels == ["from-discord", "bug"]
    assert session.command == "bug"
    assert len(session.fields) == 7


def test_concurrent_access_from_threads():
    store = ModalSessionStore()
    keys = [f"bug_1001_{i}" for i in range(200)]

    def worker(chunk):
        for key in chunk:
            store.create(key, make_session(key))
            assert store.get(key) is not None

    threads = [threading.Thread(target=worker, args=(keys[i::4],)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 200
    assert sorted(store.keys()) == sorted(keys)
