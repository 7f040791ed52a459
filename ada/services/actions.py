"""
Action execution service

Executes approved actions against their subsystems:
- add_to_calendar -> calendar provider
- set_reminder -> notification provider
- summarize -> remote summarize function
- save_contact, create_note, track_price -> not implemented yet
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from ada.backend.base import BackendClient
from ada.config import Settings
from ada.errors import AdaError
from ada.models import (
    PLACEHOLDER_ACTIONS,
    Action,
    ActionStatus,
    ActionType,
    CalendarActionData,
    ReminderActionData,
)
from ada.platform.base import (
    CalendarEvent,
    CalendarProvider,
    NotificationProvider,
    PermissionStatus,
    ScheduledNotification,
)

DEFAULT_EVENT_DURATION = timedelta(hours=1)

Clock = Callable[[], datetime]


class ActionError(AdaError):
    """Base class for action execution failures"""
    pass


class ActionValidationError(ActionError):
    """Action payload is missing required fields"""
    pass


class PermissionDeniedError(ActionError):
    """The user refused a platform capability"""
    pass


class ReminderTimingError(ActionError):
    """Reminder would fire too soon or in the past"""
    pass


class ActionNotSupportedError(ActionError):
    """Recognized action type without an implementation yet"""
    pass


class UnknownActionTypeError(ActionError):
    pass


class ActionStateError(ActionError):
    """Action is terminal and cannot be executed again"""
    pass


def _system_clock() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Read naive datetimes as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ActionExecutor:
    """Validates an action and performs it against the platform or backend"""

    def __init__(
        self,
        backend: BackendClient,
        calendar: CalendarProvider,
        notifications: NotificationProvider,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the executor

        Args:
            backend: System of record, used to persist action outcomes
            calendar: Calendar capability
            notifications: Notification capability
            settings: Application settings (if None, will load from environment)
            clock: Returns the current time; defaults to the system clock in UTC
        """
        if settings is None:
            from ada.config import get_settings
            settings = get_settings()

        self.backend = backend
        self.calendar = calendar
        self.notifications = notifications
        self.settings = settings
        self.clock = clock or _system_clock

    async def execute(self, action: Action) -> Dict[str, Any]:
        """
        Execute an action

        Does not check whether the action is already terminal; that is the
        caller's job.

        Args:
            action: Action to execute

        Returns:
            Result payload of the executed action

        Raises:
            ActionError: Any validation, permission, timing or type failure
        """
        action_type = action.type
        logger.info(f"Executing {action_type} action {action.id}")

        if action_type == ActionType.ADD_TO_CALENDAR:
            return await self.execute_calendar(action)
        if action_type == ActionType.SET_REMINDER:
            return await self.execute_reminder(action)
        if action_type == ActionType.SUMMARIZE:
            await self.backend.trigger_summarize(action.item_id, action.id)
            return {"triggered": True}
        if action_type in PLACEHOLDER_ACTIONS:
            raise ActionNotSupportedError(f"{action_type.replace('_', ' ')} is coming soon")

        raise UnknownActionTypeError(f"Unknown action type: {action_type}")

    async def execute_calendar(self, action: Action) -> Dict[str, Any]:
        try:
            data = CalendarActionData.model_validate(action.action_data)
        except ValidationError as e:
            raise ActionValidationError("Invalid calendar action data: missing required fields", e)

        calendar_id = await self._default_calendar_id()

        start = as_utc(data.start_time)
        end = as_utc(data.end_time) if data.end_time else start + DEFAULT_EVENT_DURATION
        event_id = await self.calendar.create_event(
            calendar_id,
            CalendarEvent(
                title=data.title,
                start=start,
                end=end,
                location=data.location,
                notes=data.description,
                all_day=data.all_day,
            ),
        )

        result = {"event_id": event_id}
        await self.backend.update_action_status(action.id, ActionStatus.COMPLETED, result)
        logger.info(f"Calendar event {event_id} created for action {action.id}")
        return result

    async def execute_reminder(self, action: Action) -> Dict[str, Any]:
        try:
            data = ReminderActionData.model_validate(action.action_data)
        except ValidationError as e:
            raise ActionValidationError("Invalid reminder action data: missing required fields", e)

        await self._ensure_notification_permission()

        trigger_at = as_utc(data.remind_at)
        lead = timedelta(seconds=self.settings.reminder_min_lead_seconds)
        if trigger_at < as_utc(self.clock()) + lead:
            raise ReminderTimingError(
                f"Reminder time must be at least {self.settings.reminder_min_lead_seconds} seconds in the future"
            )

        notification_id = await self.notifications.schedule(
            ScheduledNotification(
                title=self.settings.reminder_title,
                body=data.message,
                trigger_at=trigger_at,
                data={"action_id": action.id, "item_id": action.item_id},
            )
        )

        result = {"notification_id": notification_id}
        await self.backend.update_action_status(action.id, ActionStatus.COMPLETED, result)
        logger.info(f"Reminder {notification_id} scheduled for {trigger_at.isoformat()}")
        return result

    async def _default_calendar_id(self) -> str:
        status = await self.calendar.request_permission()
        if status != PermissionStatus.GRANTED:
            raise PermissionDeniedError("Calendar permission denied")

        calendars = await self.calendar.list_calendars()
        writable = [cal for cal in calendars if cal.allows_modifications]
        primary = next((cal for cal in writable if cal.is_primary), None)
        chosen = primary or (writable[0] if writable else None)
        if chosen is not None:
            return chosen.id

        logger.info(f"No writable calendar found, creating '{self.settings.app_calendar_name}'")
        return await self.calendar.create_calendar(self.settings.app_calendar_name)

    async def _ensure_notification_permission(self) -> None:
        if await self.notifications.get_permission() == PermissionStatus.GRANTED:
            return
        if await self.notifications.request_permission() != PermissionStatus.GRANTED:
            raise PermissionDeniedError("Notification permission denied")
