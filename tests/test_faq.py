"""Tests for the FAQ catalog."""

import pytest

from discord_github_bot.faq import FAQCatalog, FAQItem, load_faq
from discord_github_bot.utils.exceptions import ConfigurationError


def test_load_faq(tmp_path):
    path = tmp_path / "faq.yaml"
    path.write_text(
        "faq:\n"
        "  - name: Getting started\n"
        "    url: https://example.org/start\n"
        "software_modules:\n"
        "  - name: Range test\n"
        "    url: https://example.org/range-test\n"
    )

    catalog = load_faq(path)

    assert [item.name for item in catalog.all_items()] == ["Getting started", "Range test"]
    assert catalog.find("Range test").url == "https://example.org/range-test"


def test_empty_file_gives_empty_catalog(tmp_path):
    path = tmp_path / "faq.yaml"
    path.write_text("")

    assert load_faq(path).all_items() == []


def test_load_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        load_faq(tmp_path / "missing.yaml")

    path = tmp_path / "bad.yaml"
    path.write_text("faq:\n  - name: no url\n")
    with pytest.raises(ConfigurationError):
        load_faq(path)


def test_find_is_exact(faq_catalog):
    assert faq_catalog.find("range test") is None
    assert faq_catalog.find("Range test") is not None


def test_suggest_caps_at_25():
    catalog = FAQCatalog(faq=[FAQItem(name=f"Topic {i}", url=f"https://example.org/{i}") for i in range(40)])

    assert len(catalog.suggest("topic")) == 25
    assert catalog.suggest("Topic 39") == ["Topic 39"]
    assert catalog.suggest("zzz") == []
