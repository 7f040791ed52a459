"""
Tests for the JSON-file platform providers
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from ada.platform import (
    CalendarEvent,
    LocalCalendar,
    LocalNotifications,
    PermissionStatus,
    PlatformError,
    ScheduledNotification,
)


def test_first_created_calendar_is_primary(tmp_path):
    calendar = LocalCalendar(str(tmp_path))

    async def scenario():
        first = await calendar.create_calendar("Ada")
        second = await calendar.create_calendar("Work")
        return first, second, await calendar.list_calendars()

    first, second, calendars = asyncio.run(scenario())

    assert [(cal.id, cal.is_primary) for cal in calendars] == [(first, True), (second, False)]
    assert all(cal.allows_modifications for cal in calendars)


def test_events_are_recorded(tmp_path):
    calendar = LocalCalendar(str(tmp_path))
    start = datetime(2026, 3, 5, 19, tzinfo=timezone.utc)

    event_id = asyncio.run(calendar.create_event(
        "cal-1", CalendarEvent(title="Dinner", start=start, end=start + timedelta(hours=1))
    ))

    rows = calendar.tables.read("calendar_events")
    assert rows[0]["id"] == event_id
    assert rows[0]["start"] == "2026-03-05T19:00:00+00:00"


def test_calendar_permission_follows_flag(tmp_path):
    assert asyncio.run(LocalCalendar(str(tmp_path)).request_permission()) == PermissionStatus.GRANTED
    denied = LocalCalendar(str(tmp_path), grant_permission=False)
    assert asyncio.run(denied.request_permission()) == PermissionStatus.DENIED


def test_notification_permission_starts_undetermined(tmp_path):
    notifications = LocalNotifications(str(tmp_path), grant_permission=False)

    async def scenario():
        before = await notifications.get_permission()
        requested = await notifications.request_permission()
        return before, requested, await notifications.get_permission()

    assert asyncio.run(scenario()) == (
        PermissionStatus.UNDETERMINED,
        PermissionStatus.DENIED,
        PermissionStatus.DENIED,
    )


def test_notifications_are_recorded(tmp_path):
    notifications = LocalNotifications(str(tmp_path))
    trigger_at = datetime(2026, 3, 2, 9, tzinfo=timezone.utc)

    notification_id = asyncio.run(notifications.schedule(
        ScheduledNotification(title="Ada Reminder", body="Call mom", trigger_at=trigger_at, data={"action_id": "a"})
    ))

    rows = notifications.tables.read("notifications")
    assert rows == [{
        "id": notification_id,
        "title": "Ada Reminder",
        "body": "Call mom",
        "trigger_at": "2026-03-02T09:00:00+00:00",
        "data": {"action_id": "a"},
    }]


def test_corrupt_calendar_table_raises_platform_error(tmp_path):
    (tmp_path / "calendars.json").write_text("{not json", encoding="utf-8")
    calendar = LocalCalendar(str(tmp_path))

    with pytest.raises(PlatformError, match="Failed to read calendars table"):
        asyncio.run(calendar.list_calendars())


def test_unwritable_notification_table_raises_platform_error(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("", encoding="utf-8")
    notifications = LocalNotifications(str(blocker / "nested"))
    notification = ScheduledNotification(
        title="Ada Reminder", body="Call back", trigger_at=datetime(2026, 3, 5, 19, tzinfo=timezone.utc)
    )

    with pytest.raises(PlatformError, match="Failed to write notifications table"):
        asyncio.run(notifications.schedule(notification))
