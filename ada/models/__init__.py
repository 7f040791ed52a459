"""
Data models module
"""
from .item import (
    Category,
    Contact,
    ContentType,
    ExtractedData,
    Item,
    ItemStatus,
    Price,
    RawCapture,
    SuggestedAction,
    Urgency,
)
from .action import (
    ACTION_LABELS,
    PLACEHOLDER_ACTIONS,
    Action,
    ActionStatus,
    ActionType,
    CalendarActionData,
    ReminderActionData,
)
from .classification import ClassificationResult

__all__ = [
    "Category",
    "Contact",
    "ContentType",
    "ExtractedData",
    "Item",
    "ItemStatus",
    "Price",
    "RawCapture",
    "SuggestedAction",
    "Urgency",
    "ACTION_LABELS",
    "PLACEHOLDER_ACTIONS",
    "Action",
    "ActionStatus",
    "ActionType",
    "CalendarActionData",
    "ReminderActionData",
    "ClassificationResult",
]
