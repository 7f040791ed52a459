"""
Shared fixtures: record factories, an in-memory backend with failure
injection, and fake platform providers
"""
import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from ada.backend.base import DEFAULT_PAGE_LIMIT, BackendClient, DatabaseError
from ada.config import Settings
from ada.models import Action, ActionStatus, Category, ContentType, Item, ItemStatus, RawCapture
from ada.platform.base import (
    CalendarEvent,
    CalendarInfo,
    CalendarProvider,
    NotificationProvider,
    PermissionStatus,
    ScheduledNotification,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

_ids = itertools.count(1)


def make_item(**overrides) -> Item:
    number = next(_ids)
    fields = {
        "id": f"item-{number}",
        "user_id": "user-1",
        "type": ContentType.TEXT,
        "raw_content": f"content {number}",
        "title": f"Item {number}",
        "status": ItemStatus.CLASSIFIED,
        "category": Category.OTHER,
        "confidence": 0.5,
        "created_at": NOW - timedelta(minutes=number),
        "updated_at": NOW - timedelta(minutes=number),
    }
    fields.update(overrides)
    return Item(**fields)


def make_action(**overrides) -> Action:
    number = next(_ids)
    fields = {
        "id": f"action-{number}",
        "user_id": "user-1",
        "item_id": "item-1",
        "type": "add_to_calendar",
        "status": ActionStatus.SUGGESTED,
        "action_data": {},
        "created_at": NOW - timedelta(minutes=number),
    }
    fields.update(overrides)
    return Action(**fields)


class FakeBackend(BackendClient):
    """
    In-memory BackendClient

    Set ``fail[method_name] = exception`` to make a call raise. Every call is
    recorded in ``calls`` as (method_name, args). ``before[method_name]`` runs a
    hook right before the call completes, which lets tests inject realtime
    pushes while a mutation is in flight.
    """

    def __init__(self, items: Optional[List[Item]] = None, actions: Optional[List[Action]] = None):
        self.items: Dict[str, Item] = {item.id: item for item in items or []}
        self.actions: Dict[str, Action] = {action.id: action for action in actions or []}
        self.fail: Dict[str, Exception] = {}
        self.before: Dict[str, Callable[[], None]] = {}
        self.calls: List[tuple] = []
        self.listeners: Dict[str, List[Callable[[Item], None]]] = {}

    def _enter(self, name: str, *args) -> None:
        self.calls.append((name, args))
        hook = self.before.get(name)
        if hook is not None:
            hook()
        if name in self.fail:
            raise self.fail[name]

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def push(self, item: Item) -> None:
        for listener in list(self.listeners.get(item.user_id, [])):
            listener(item)

    async def save_item(self, user_id: str, capture: RawCapture) -> Item:
        self._enter("save_item", user_id, capture)
        item = Item(
            id=f"item-{next(_ids)}",
            user_id=user_id,
            type=capture.type,
            raw_content=capture.content,
            source_app=capture.source_app,
        )
        self.items[item.id] = item
        return item

    async def get_items(self, user_id, status=None, category=None, limit=DEFAULT_PAGE_LIMIT, offset=0):
        self._enter("get_items", user_id, limit, offset)
        items = [item for item in self.items.values() if item.user_id == user_id]
        items.sort(key=lambda item: item.created_at, reverse=True)
        return items[offset:offset + limit]

    async def get_item_by_id(self, item_id: str) -> Optional[Item]:
        self._enter("get_item_by_id", item_id)
        return self.items.get(item_id)

    async def update_item(self, item_id: str, updates: Dict[str, Any]) -> Item:
        self._enter("update_item", item_id, updates)
        if item_id not in self.items:
            raise DatabaseError("Update returned no data")
        self.items[item_id] = self.items[item_id].model_copy(update=updates)
        return self.items[item_id]

    async def archive_item(self, item_id: str) -> None:
        self._enter("archive_item", item_id)
        self.items[item_id] = self.items[item_id].model_copy(update={"status": ItemStatus.ARCHIVED})

    async def delete_item(self, item_id: str) -> None:
        self._enter("delete_item", item_id)
        self.items.pop(item_id, None)

    async def toggle_star(self, item_id: str, starred: bool) -> Item:
        self._enter("toggle_star", item_id, starred)
        self.items[item_id] = self.items[item_id].model_copy(update={"is_starred": starred})
        return self.items[item_id]

    async def update_user_note(self, item_id: str, note: Optional[str]) -> Item:
        self._enter("update_user_note", item_id, note)
        self.items[item_id] = self.items[item_id].model_copy(update={"user_note": note})
        return self.items[item_id]

    async def create_actions(self, actions: List[Action]) -> List[Action]:
        self._enter("create_actions", actions)
        for action in actions:
            self.actions[action.id] = action
        return actions

    async def get_actions_for_item(self, item_id: str) -> List[Action]:
        self._enter("get_actions_for_item", item_id)
        return [action for action in self.actions.values() if action.item_id == item_id]

    async def get_actions_for_user(self, user_id, status=None, limit=DEFAULT_PAGE_LIMIT, offset=0):
        self._enter("get_actions_for_user", user_id, limit, offset)
        actions = [action for action in self.actions.values() if action.user_id == user_id]
        actions.sort(key=lambda action: action.created_at, reverse=True)
        return actions[offset:offset + limit]

    async def update_action_status(self, action_id, status, result=None) -> None:
        self._enter("update_action_status", action_id, status, result)
        if action_id in self.actions:
            updates = {"status": status}
            if result:
                updates["result"] = result
            self.actions[action_id] = self.actions[action_id].model_copy(update=updates)

    async def trigger_classify(self, item_id: str) -> None:
        self._enter("trigger_classify", item_id)

    async def trigger_summarize(self, item_id: str, action_id: str) -> None:
        self._enter("trigger_summarize", item_id, action_id)

    def subscribe_to_items(self, user_id, on_update):
        self.calls.append(("subscribe_to_items", (user_id,)))
        self.listeners.setdefault(user_id, []).append(on_update)

        def unsubscribe() -> None:
            self.listeners[user_id].remove(on_update)

        return unsubscribe


class FakeCalendar(CalendarProvider):
    def __init__(self, permission=PermissionStatus.GRANTED, calendars: Optional[List[CalendarInfo]] = None):
        self.permission = permission
        self.calendars = list(calendars) if calendars is not None else [
            CalendarInfo(id="cal-primary", title="Personal", allows_modifications=True, is_primary=True),
        ]
        self.created_calendars: List[str] = []
        self.events: List[tuple] = []

    async def request_permission(self) -> PermissionStatus:
        return self.permission

    async def list_calendars(self) -> List[CalendarInfo]:
        return list(self.calendars)

    async def create_calendar(self, title: str) -> str:
        self.created_calendars.append(title)
        calendar_id = f"cal-{title.lower()}"
        self.calendars.append(CalendarInfo(id=calendar_id, title=title))
        return calendar_id

    async def create_event(self, calendar_id: str, event: CalendarEvent) -> str:
        self.events.append((calendar_id, event))
        return f"event-{len(self.events)}"


class FakeNotifications(NotificationProvider):
    def __init__(self, existing=PermissionStatus.GRANTED, requested=PermissionStatus.GRANTED):
        self.existing = existing
        self.requested = requested
        self.permission_requests = 0
        self.scheduled: List[ScheduledNotification] = []

    async def get_permission(self) -> PermissionStatus:
        return self.existing

    async def request_permission(self) -> PermissionStatus:
        self.permission_requests += 1
        return self.requested

    async def schedule(self, notification: ScheduledNotification) -> str:
        self.scheduled.append(notification)
        return f"notification-{len(self.scheduled)}"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and .env file"""
    for name in ("BASE_URL", "API_KEY", "ADA_DATA_DIR", "PAGE_LIMIT", "REMINDER_MIN_LEAD_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ADA_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def settings() -> Settings:
    return Settings(load_env=False)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def notifications() -> FakeNotifications:
    return FakeNotifications()

