"""
Platform capabilities - calendar and notifications
"""
from .base import (
    CalendarEvent,
    CalendarInfo,
    CalendarProvider,
    NotificationProvider,
    PermissionStatus,
    PlatformError,
    ScheduledNotification,
)
from .local import LocalCalendar, LocalNotifications

__all__ = [
    "CalendarEvent",
    "CalendarInfo",
    "CalendarProvider",
    "NotificationProvider",
    "PermissionStatus",
    "PlatformError",
    "ScheduledNotification",
    "LocalCalendar",
    "LocalNotifications",
]
