"""
Local platform providers backed by JSON files
Stand-ins for OS calendar and notification services when running from the CLI
"""
from typing import List
from uuid import uuid4

from loguru import logger

from ada.platform.base import (
    CalendarEvent,
    CalendarInfo,
    CalendarProvider,
    NotificationProvider,
    PermissionStatus,
    PlatformError,
    ScheduledNotification,
)
from ada.utils.json_tables import JsonTables


class LocalCalendar(CalendarProvider):
    """Calendar provider storing calendars and events under base_dir"""

    def __init__(self, base_dir: str = "data", grant_permission: bool = True):
        self.tables = JsonTables(base_dir, PlatformError)
        self.grant_permission = grant_permission

    async def request_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.grant_permission else PermissionStatus.DENIED

    async def list_calendars(self) -> List[CalendarInfo]:
        return [CalendarInfo(**row) for row in self.tables.read("calendars")]

    async def create_calendar(self, title: str) -> str:
        calendars = self.tables.read("calendars")
        calendar_id = str(uuid4())
        calendars.append({
            "id": calendar_id,
            "title": title,
            "allows_modifications": True,
            "is_primary": not calendars,
        })
        self.tables.write("calendars", calendars)
        logger.info(f"Created local calendar '{title}' ({calendar_id})")
        return calendar_id

    async def create_event(self, calendar_id: str, event: CalendarEvent) -> str:
        events = self.tables.read("calendar_events")
        event_id = str(uuid4())
        events.append({
            "id": event_id,
            "calendar_id": calendar_id,
            "title": event.title,
            "start": event.start.isoformat(),
            "end": event.end.isoformat(),
            "location": event.location,
            "notes": event.notes,
            "all_day": event.all_day,
        })
        self.tables.write("calendar_events", events)
        return event_id


class LocalNotifications(NotificationProvider):
    """Notification provider recording scheduled notifications under base_dir"""

    def __init__(self, base_dir: str = "data", grant_permission: bool = True):
        self.tables = JsonTables(base_dir, PlatformError)
        self.grant_permission = grant_permission
        self._status = PermissionStatus.UNDETERMINED

    async def get_permission(self) -> PermissionStatus:
        return self._status

    async def request_permission(self) -> PermissionStatus:
        self._status = PermissionStatus.GRANTED if self.grant_permission else PermissionStatus.DENIED
        return self._status

    async def schedule(self, notification: ScheduledNotification) -> str:
        rows = self.tables.read("notifications")
        notification_id = str(uuid4())
        rows.append({
            "id": notification_id,
            "title": notification.title,
            "body": notification.body,
            "trigger_at": notification.trigger_at.isoformat(),
            "data": notification.data,
        })
        self.tables.write("notifications", rows)
        return notification_id
