"""
Tests for the JSON system of record, its functions and realtime fan-out
"""
import asyncio
import json
import os

import pytest

from conftest import make_action
from ada.backend import DatabaseError, FunctionError, JsonBackend, RealtimeHub
from ada.backend.realtime import ITEM_CREATED, ITEM_UPDATED, items_channel
from ada.models import ActionStatus, Category, ContentType, ItemStatus, RawCapture
from ada.services.ai_classifier import ClassificationError


class StubFetcher:
    def __init__(self, text="fetched page text"):
        self.text = text
        self.urls = []

    async def fetch_or_url(self, url):
        self.urls.append(url)
        return self.text


class FailingClassifier:
    def __init__(self):
        self.calls = 0

    async def classify(self, content, content_type):
        self.calls += 1
        raise ClassificationError("AI API error: Connection refused")


class StubSummarizer:
    def __init__(self, summary="A short summary."):
        self.summary = summary
        self.inputs = []

    async def summarize(self, content):
        self.inputs.append(content)
        return self.summary


@pytest.fixture
def json_backend(settings, tmp_path):
    return JsonBackend(settings, base_dir=str(tmp_path / "tables"))


def _capture(content, content_type=ContentType.TEXT, **fields):
    return RawCapture(type=content_type, content=content, **fields)


# Items

def test_save_item_persists_pending_item(json_backend, tmp_path):
    item = asyncio.run(json_backend.save_item(
        "user-1", _capture("buy milk", source_app="notes", user_input="before friday")
    ))

    assert item.status == ItemStatus.PENDING
    assert item.user_note == "before friday"
    assert item.source_app == "notes"
    with open(os.path.join(str(tmp_path / "tables"), "items.json"), encoding="utf-8") as handle:
        rows = json.load(handle)
    assert rows[0]["id"] == item.id
    assert rows[0]["status"] == "pending"


def test_get_items_newest_first_with_filters_and_paging(json_backend):
    async def scenario():
        first = await json_backend.save_item("user-1", _capture("one"))
        second = await json_backend.save_item("user-1", _capture("two"))
        third = await json_backend.save_item("user-1", _capture("three"))
        await json_backend.save_item("user-2", _capture("someone else"))
        await json_backend.update_item(second.id, {"status": ItemStatus.CLASSIFIED, "category": Category.TRAVEL})

        all_items = await json_backend.get_items("user-1")
        page = await json_backend.get_items("user-1", limit=2, offset=1)
        travel = await json_backend.get_items("user-1", category=Category.TRAVEL)
        pending = await json_backend.get_items("user-1", status=ItemStatus.PENDING)
        return [first, second, third], all_items, page, travel, pending

    saved, all_items, page, travel, pending = asyncio.run(scenario())
    first, second, third = saved

    assert [item.id for item in all_items] == [third.id, second.id, first.id]
    assert [item.id for item in page] == [second.id, first.id]
    assert [item.id for item in travel] == [second.id]
    assert [item.id for item in pending] == [third.id, first.id]


def test_update_item_missing_raises(json_backend):
    with pytest.raises(DatabaseError, match="Update returned no data"):
        asyncio.run(json_backend.update_item("nope", {"title": "x"}))


def test_update_item_rejects_invalid_values(json_backend):
    item = asyncio.run(json_backend.save_item("user-1", _capture("text")))

    with pytest.raises(DatabaseError):
        asyncio.run(json_backend.update_item(item.id, {"confidence": 7}))


def test_item_mutations(json_backend):
    async def scenario():
        item = await json_backend.save_item("user-1", _capture("text"))
        await json_backend.toggle_star(item.id, True)
        await json_backend.update_user_note(item.id, "remember")
        await json_backend.archive_item(item.id)
        return await json_backend.get_item_by_id(item.id)

    item = asyncio.run(scenario())

    assert item.is_starred is True
    assert item.user_note == "remember"
    assert item.status == ItemStatus.ARCHIVED
    assert item.updated_at >= item.created_at


def test_delete_item_removes_its_actions(json_backend):
    async def scenario():
        kept = await json_backend.save_item("user-1", _capture("kept"))
        doomed = await json_backend.save_item("user-1", _capture("doomed"))
        await json_backend.create_actions([
            make_action(item_id=doomed.id, user_id="user-1"),
            make_action(item_id=kept.id, user_id="user-1"),
        ])
        await json_backend.delete_item(doomed.id)
        return (
            await json_backend.get_item_by_id(doomed.id),
            await json_backend.get_actions_for_user("user-1"),
            kept,
        )

    deleted, actions, kept = asyncio.run(scenario())

    assert deleted is None
    assert [action.item_id for action in actions] == [kept.id]


def test_delete_missing_item_raises(json_backend):
    with pytest.raises(DatabaseError):
        asyncio.run(json_backend.delete_item("nope"))


# Actions

def test_action_queries_and_status_updates(json_backend):
    first = make_action(item_id="item-a")
    second = make_action(item_id="item-a", status=ActionStatus.DISMISSED)
    other = make_action(item_id="item-b")

    async def scenario():
        await json_backend.create_actions([first, second, other])
        await json_backend.update_action_status(first.id, ActionStatus.COMPLETED, {"event_id": "e-1"})
        return (
            await json_backend.get_actions_for_item("item-a"),
            await json_backend.get_actions_for_user("user-1", status=ActionStatus.COMPLETED),
        )

    for_item, completed = asyncio.run(scenario())

    assert {action.id for action in for_item} == {first.id, second.id}
    assert [action.id for action in completed] == [first.id]
    assert completed[0].result == {"event_id": "e-1"}
    assert completed[0].completed_at is not None


def test_update_missing_action_raises(json_backend):
    with pytest.raises(DatabaseError):
        asyncio.run(json_backend.update_action_status("nope", ActionStatus.DISMISSED))


def test_corrupt_table_raises_database_error(json_backend, tmp_path):
    os.makedirs(str(tmp_path / "tables"), exist_ok=True)
    with open(os.path.join(str(tmp_path / "tables"), "items.json"), "w", encoding="utf-8") as handle:
        handle.write("{not json")

    with pytest.raises(DatabaseError, match="Failed to read items table"):
        asyncio.run(json_backend.get_items("user-1"))


# Classify function

def test_classify_trigger_runs_in_background_and_publishes(json_backend):
    events = []
    json_backend.hub.subscribe(items_channel("user-1"), lambda event, payload: events.append(event))

    async def scenario():
        item = await json_backend.save_item(
            "user-1", _capture("https://www.youtube.com/watch?v=abc", ContentType.LINK)
        )
        await json_backend.trigger_classify(item.id)
        await json_backend.drain()
        return (
            await json_backend.get_item_by_id(item.id),
            await json_backend.get_actions_for_item(item.id),
        )

    item, actions = asyncio.run(scenario())

    assert item.status == ItemStatus.CLASSIFIED
    assert item.category == Category.ENTERTAINMENT
    assert item.title == "youtube.com"
    assert [action.type for action in actions] == ["summarize"]
    assert actions[0].status == ActionStatus.SUGGESTED
    assert actions[0].action_data == {"label": "Summarize"}
    assert events == [ITEM_CREATED, ITEM_UPDATED]


def test_subscribers_receive_classified_items(json_backend):
    received = []
    unsubscribe = json_backend.subscribe_to_items("user-1", received.append)

    async def scenario():
        item = await json_backend.save_item("user-1", _capture("Concert tickets for the festival, RSVP now!"))
        await json_backend.trigger_classify(item.id)
        await json_backend.drain()

    asyncio.run(scenario())
    unsubscribe()

    assert [item.status for item in received] == [ItemStatus.PENDING, ItemStatus.CLASSIFIED]
    assert received[-1].category == Category.EVENTS_PLANS
    assert json_backend.hub.subscriber_count(items_channel("user-1")) == 0


def test_classify_skips_items_that_are_not_pending(json_backend):
    async def scenario():
        item = await json_backend.save_item("user-1", _capture("text"))
        await json_backend.archive_item(item.id)
        return await json_backend.classify_function(item.id)

    item = asyncio.run(scenario())

    assert item.status == ItemStatus.ARCHIVED
    assert item.category is None


def test_classify_missing_item_raises(json_backend):
    with pytest.raises(FunctionError, match="Item not found"):
        asyncio.run(json_backend.classify_function("nope"))


def test_failed_background_classify_is_logged_not_raised(json_backend):
    async def scenario():
        await json_backend.trigger_classify("nope")
        await json_backend.drain()

    asyncio.run(scenario())


def test_ai_failure_falls_back_to_heuristics(json_backend):
    fetcher = StubFetcher()
    classifier = FailingClassifier()
    json_backend.classify_function.fetcher = fetcher
    json_backend.classify_function.classifier = classifier

    async def scenario():
        item = await json_backend.save_item("user-1", _capture("https://arxiv.org/abs/2301.1", ContentType.LINK))
        return await json_backend.classify_function(item.id)

    item = asyncio.run(scenario())

    assert classifier.calls == 1
    assert fetcher.urls == ["https://arxiv.org/abs/2301.1"]
    assert item.category == Category.LEARNING
    assert item.confidence == 0.9
    assert item.status == ItemStatus.CLASSIFIED


# Summarize function

def test_summarize_without_ai_marks_action_failed(json_backend):
    action = make_action(type="summarize")

    async def scenario():
        await json_backend.create_actions([action])
        with pytest.raises(FunctionError, match="not configured"):
            await json_backend.trigger_summarize(action.item_id, action.id)
        return await json_backend.get_actions_for_user("user-1")

    actions = asyncio.run(scenario())

    assert actions[0].status == ActionStatus.FAILED
    assert "not configured" in actions[0].result["error"]


def test_summarize_completes_action_and_describes_item(json_backend):
    summarizer = StubSummarizer("Key points of the article. " * 50)
    json_backend.summarize_function.summarizer = summarizer
    json_backend.summarize_function.fetcher = StubFetcher("Long article body")
    received = []
    json_backend.subscribe_to_items("user-1", received.append)

    async def scenario():
        item = await json_backend.save_item("user-1", _capture("https://blog.example.com/post", ContentType.LINK))
        action = make_action(type="summarize", item_id=item.id)
        await json_backend.create_actions([action])
        await json_backend.trigger_summarize(item.id, action.id)
        return (
            await json_backend.get_item_by_id(item.id),
            await json_backend.get_actions_for_item(item.id),
        )

    item, actions = asyncio.run(scenario())

    assert summarizer.inputs == ["Long article body"]
    assert actions[0].status == ActionStatus.COMPLETED
    assert actions[0].result == {"summary": summarizer.summary}
    assert item.description == summarizer.summary[:1000]
    assert received[-1].description == item.description


class ConflictingDescriptionBackend(JsonBackend):
    async def update_item(self, item_id, updates):
        if "description" in updates:
            raise DatabaseError("write conflict")
        return await super().update_item(item_id, updates)


def test_summary_write_failure_marks_action_failed_without_completing(settings, tmp_path):
    backend = ConflictingDescriptionBackend(settings, base_dir=str(tmp_path / "tables"))
    backend.summarize_function.summarizer = StubSummarizer()

    async def scenario():
        item = await backend.save_item("user-1", _capture("a long note worth summarizing"))
        action = make_action(type="summarize", item_id=item.id)
        await backend.create_actions([action])
        with pytest.raises(FunctionError, match="write conflict"):
            await backend.trigger_summarize(item.id, action.id)
        return await backend.get_actions_for_item(item.id)

    actions = asyncio.run(scenario())

    assert actions[0].status == ActionStatus.FAILED
    assert actions[0].result == {"error": "write conflict"}
    assert actions[0].completed_at is None


@pytest.mark.parametrize("terminal", [ActionStatus.COMPLETED, ActionStatus.DISMISSED, ActionStatus.FAILED])
def test_terminal_action_status_cannot_change(json_backend, terminal):
    action = make_action(status=terminal, result={"summary": "done"})

    async def scenario():
        await json_backend.create_actions([action])
        with pytest.raises(DatabaseError, match=f"from {terminal.value} to failed"):
            await json_backend.update_action_status(action.id, ActionStatus.FAILED, {"error": "late"})
        return await json_backend.get_actions_for_user("user-1")

    actions = asyncio.run(scenario())

    assert actions[0].status == terminal
    assert actions[0].result == {"summary": "done"}


def test_completed_summary_is_not_overwritten_by_a_later_failure(json_backend):
    action = make_action(type="summarize")

    async def scenario():
        await json_backend.create_actions([action])
        await json_backend.update_action_status(action.id, ActionStatus.COMPLETED, {"summary": "kept"})
        with pytest.raises(DatabaseError):
            await json_backend.update_action_status(action.id, ActionStatus.FAILED, {"error": "too late"})
        return await json_backend.get_actions_for_user("user-1")

    actions = asyncio.run(scenario())

    assert actions[0].status == ActionStatus.COMPLETED
    assert actions[0].result == {"summary": "kept"}
    assert actions[0].completed_at is not None


# Realtime hub

def test_hub_isolates_failing_handlers():
    hub = RealtimeHub()
    received = []

    def broken(event, payload):
        raise RuntimeError("handler bug")

    hub.subscribe("items:u", broken)
    hub.subscribe("items:u", lambda event, payload: received.append(payload))
    hub.publish("items:u", ITEM_UPDATED, {"item": {}})
    hub.publish("items:other", ITEM_UPDATED, {"item": {}})

    assert received == [{"item": {}}]


def test_unsubscribe_twice_is_harmless():
    hub = RealtimeHub()
    unsubscribe = hub.subscribe("items:u", lambda event, payload: None)

    unsubscribe()
    unsubscribe()

    assert hub.subscriber_count("items:u") == 0
