"""
Tests for share intake
"""
import asyncio

import pytest

from conftest import FakeBackend
from ada.backend.base import DatabaseError
from ada.models import Category, ContentType, ItemStatus
from ada.services.share_handler import ShareInput, detect_content_type, process_shared_content


@pytest.mark.parametrize("share, expected", [
    (ShareInput(url="https://a.com", text="hello", image_uri="file:///x.png"), (ContentType.LINK, "https://a.com")),
    (ShareInput(image_uri="file:///x.png", text="caption"), (ContentType.IMAGE, "file:///x.png")),
    (ShareInput(text="  https://youtu.be/abc  "), (ContentType.LINK, "https://youtu.be/abc")),
    (ShareInput(text="example.com/page"), (ContentType.LINK, "example.com/page")),
    (ShareInput(text="remember the milk"), (ContentType.TEXT, "remember the milk")),
    (ShareInput(), (ContentType.TEXT, "")),
])
def test_detect_content_type(share, expected):
    assert detect_content_type(share) == expected


def test_long_text_is_truncated():
    content_type, content = detect_content_type(ShareInput(text="a b " * 10), max_text_length=7)

    assert content_type == ContentType.TEXT
    assert content == "a b a b"


def test_share_saves_pending_item_and_triggers_classification(settings):
    backend = FakeBackend()
    share = ShareInput(url="https://www.youtube.com/watch?v=abc", source_app="com.google.youtube")

    result = asyncio.run(process_shared_content(backend, "user-1", share, settings))

    assert result.item.status == ItemStatus.PENDING
    assert result.item.type == ContentType.LINK
    assert result.item.source_app == "com.google.youtube"
    assert result.heuristic_hint.category == Category.ENTERTAINMENT
    assert backend.call_names() == ["save_item", "trigger_classify"]
    assert backend.calls[1] == ("trigger_classify", (result.item.id,))


def test_trigger_failure_is_not_fatal(settings):
    backend = FakeBackend()
    backend.fail["trigger_classify"] = RuntimeError("function offline")

    result = asyncio.run(process_shared_content(backend, "user-1", ShareInput(text="buy milk"), settings))

    assert result.item.id in backend.items
    assert result.item.status == ItemStatus.PENDING


def test_save_failure_propagates(settings):
    backend = FakeBackend()
    backend.fail["save_item"] = DatabaseError("insert failed")

    with pytest.raises(DatabaseError):
        asyncio.run(process_shared_content(backend, "user-1", ShareInput(text="buy milk"), settings))

    assert "trigger_classify" not in backend.call_names()
