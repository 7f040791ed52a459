"""
Platform capability interfaces
Calendar and notification access as seen by the action dispatcher
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ada.errors import AdaError


class PlatformError(AdaError):
    """Raised when a platform provider cannot read or write its local state"""
    pass


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


@dataclass
class CalendarInfo:
    id: str
    title: str
    allows_modifications: bool = True
    is_primary: bool = False


@dataclass
class CalendarEvent:
    title: str
    start: datetime
    end: datetime
    location: Optional[str] = None
    notes: Optional[str] = None
    all_day: bool = False


@dataclass
class ScheduledNotification:
    title: str
    body: str
    trigger_at: datetime
    data: Dict[str, Any] = field(default_factory=dict)


class CalendarProvider(ABC):
    @abstractmethod
    async def request_permission(self) -> PermissionStatus:
        raise NotImplementedError

    @abstractmethod
    async def list_calendars(self) -> List[CalendarInfo]:
        raise NotImplementedError

    @abstractmethod
    async def create_calendar(self, title: str) -> str:
        """Create a calendar owned by the app and return its id"""
        raise NotImplementedError

    @abstractmethod
    async def create_event(self, calendar_id: str, event: CalendarEvent) -> str:
        """Create an event and return its id"""
        raise NotImplementedError


class NotificationProvider(ABC):
    @abstractmethod
    async def get_permission(self) -> PermissionStatus:
        raise NotImplementedError

    @abstractmethod
    async def request_permission(self) -> PermissionStatus:
        raise NotImplementedError

    @abstractmethod
    async def schedule(self, notification: ScheduledNotification) -> str:
        """Schedule a notification at a date and return its id"""
        raise NotImplementedError
