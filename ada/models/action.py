"""
Data models for actions
Actions are things Ada can do with classified items
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .item import Urgency, utc_now


class ActionType(str, Enum):
    ADD_TO_CALENDAR = "add_to_calendar"
    SET_REMINDER = "set_reminder"
    SAVE_CONTACT = "save_contact"
    SUMMARIZE = "summarize"
    CREATE_NOTE = "create_note"
    TRACK_PRICE = "track_price"


ACTION_LABELS = {
    ActionType.ADD_TO_CALENDAR: "Add to Calendar",
    ActionType.SET_REMINDER: "Set Reminder",
    ActionType.SAVE_CONTACT: "Save Contact",
    ActionType.SUMMARIZE: "Summarize",
    ActionType.CREATE_NOTE: "Create Note",
    ActionType.TRACK_PRICE: "Track Price",
}

# Recognized but not implemented yet
PLACEHOLDER_ACTIONS = frozenset({
    ActionType.SAVE_CONTACT,
    ActionType.CREATE_NOTE,
    ActionType.TRACK_PRICE,
})


class ActionStatus(str, Enum):
    """
    Action status state machine

        suggested -> approved -> completed
        suggested -> completed
        suggested -> dismissed
        suggested | approved -> failed

    dismissed, completed and failed are terminal.
    """
    SUGGESTED = "suggested"
    APPROVED = "approved"
    COMPLETED = "completed"
    DISMISSED = "dismissed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return not _ACTION_TRANSITIONS[self]

    def can_transition_to(self, target: "ActionStatus") -> bool:
        return target in _ACTION_TRANSITIONS[self]


_ACTION_TRANSITIONS = {
    ActionStatus.SUGGESTED: {
        ActionStatus.APPROVED,
        ActionStatus.COMPLETED,
        ActionStatus.DISMISSED,
        ActionStatus.FAILED,
    },
    ActionStatus.APPROVED: {ActionStatus.COMPLETED, ActionStatus.FAILED},
    ActionStatus.COMPLETED: set(),
    ActionStatus.DISMISSED: set(),
    ActionStatus.FAILED: set(),
}


class Action(BaseModel):
    """A persisted, user-facing unit of work tied to an item"""
    id: str
    user_id: str
    item_id: str
    # Plain string so types the dispatcher does not know still reach it
    type: str
    status: ActionStatus = ActionStatus.SUGGESTED
    action_data: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[Dict[str, Any]] = None
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        label = self.action_data.get("label")
        if isinstance(label, str) and label:
            return label
        try:
            return ACTION_LABELS[ActionType(self.type)]
        except ValueError:
            return self.type.replace("_", " ").capitalize()


def _require_text(value: Any) -> Any:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("must be a non-empty string")
    return value


def _require_time(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    return _require_text(value)


class CalendarActionData(BaseModel):
    """Payload of an add_to_calendar action"""
    title: str
    start_time: datetime
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None
    all_day: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _title_not_empty(cls, value: Any) -> Any:
        return _require_text(value)

    @field_validator("start_time", mode="before")
    @classmethod
    def _start_not_empty(cls, value: Any) -> Any:
        return _require_time(value)

    @field_validator("end_time", mode="before")
    @classmethod
    def _blank_end_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ReminderActionData(BaseModel):
    """Payload of a set_reminder action"""
    message: str
    remind_at: datetime
    urgency: Optional[Urgency] = None

    @field_validator("message", mode="before")
    @classmethod
    def _message_not_empty(cls, value: Any) -> Any:
        return _require_text(value)

    @field_validator("remind_at", mode="before")
    @classmethod
    def _remind_at_not_empty(cls, value: Any) -> Any:
        return _require_time(value)

    @field_validator("urgency", mode="before")
    @classmethod
    def _lenient_urgency(cls, value: Any) -> Any:
        if isinstance(value, Urgency) or (isinstance(value, str) and value in Urgency._value2member_map_):
            return value
        return None
