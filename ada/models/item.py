"""
Data models for shared content items
An "item" is anything the user shares into Ada
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ContentType(str, Enum):
    """How the content reached Ada"""
    LINK = "link"
    TEXT = "text"
    IMAGE = "image"
    SCREENSHOT = "screenshot"


class Category(str, Enum):
    """The 12 fixed item categories, in declaration order"""
    EVENTS_PLANS = "events_plans"
    FOOD_DINING = "food_dining"
    SHOPPING_DEALS = "shopping_deals"
    TRAVEL = "travel"
    JOBS_CAREER = "jobs_career"
    LEARNING = "learning"
    ENTERTAINMENT = "entertainment"
    HEALTH_FITNESS = "health_fitness"
    FINANCE = "finance"
    SOCIAL = "social"
    INSPIRATION = "inspiration"
    OTHER = "other"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ItemStatus(str, Enum):
    """
    Item lifecycle: pending -> classified -> archived

    Archived is reachable from pending or classified. Only an explicit
    reclassify moves an item backwards, to pending.
    """
    PENDING = "pending"
    CLASSIFIED = "classified"
    ARCHIVED = "archived"

    def can_transition_to(self, target: "ItemStatus", reclassify: bool = False) -> bool:
        if reclassify:
            return target is ItemStatus.PENDING and self is not ItemStatus.PENDING
        return target in _ITEM_TRANSITIONS[self]


_ITEM_TRANSITIONS = {
    ItemStatus.PENDING: {ItemStatus.CLASSIFIED, ItemStatus.ARCHIVED},
    ItemStatus.CLASSIFIED: {ItemStatus.ARCHIVED},
    ItemStatus.ARCHIVED: set(),
}


class Price(BaseModel):
    amount: float
    currency: str = "USD"


class Contact(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ExtractedData(BaseModel):
    """Structured facts pulled out of an item's content"""
    dates: Optional[List[str]] = Field(default=None, description="Date strings found in the content")
    prices: Optional[List[Price]] = Field(default=None, description="Prices with currency")
    locations: Optional[List[str]] = Field(default=None, description="Place names")
    contacts: Optional[List[Contact]] = Field(default=None, description="Partial contacts (name, email, phone)")
    urls: Optional[List[str]] = None
    deadline: Optional[str] = Field(default=None, description="ISO date of a deadline if applicable")
    deadline_description: Optional[str] = None
    urgency: Optional[Urgency] = Field(default=None, description="Urgency derived from the nearest date")
    ocr_text: Optional[str] = Field(default=None, description="Visible text of an image or screenshot")

    def to_bag(self) -> Dict[str, Any]:
        """Serialize without unset fields"""
        return self.model_dump(mode="json", exclude_none=True)


class SuggestedAction(BaseModel):
    """A proposed action, not yet persisted"""
    type: str
    label: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = Field(description="Lower is more urgent")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Item(BaseModel):
    """One shared piece of content"""
    id: str
    user_id: str
    type: ContentType
    raw_content: str
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[Category] = None
    extracted_data: Optional[ExtractedData] = None
    suggested_actions: Optional[List[SuggestedAction]] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    status: ItemStatus = ItemStatus.PENDING
    source_app: Optional[str] = None
    is_starred: bool = False
    user_note: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RawCapture(BaseModel):
    """What comes in from a share before classification"""
    type: ContentType
    content: str
    source_app: Optional[str] = None
    user_input: Optional[str] = None
