"""
Action suggestion engine
Maps a category and extracted data to a short, ranked list of suggested actions
"""
from typing import List, Optional

from ada.models import ACTION_LABELS, ActionType, Category, ExtractedData, SuggestedAction, Urgency
from ada.services.extractor import parse_date

# Attention budget: never propose more than this many actions per item
MAX_SUGGESTIONS = 3


def _suggestion(action_type: ActionType, data: dict, priority: int) -> SuggestedAction:
    return SuggestedAction(type=action_type.value, label=ACTION_LABELS[action_type], data=data, priority=priority)


def suggest_actions(
    category: Category,
    data: ExtractedData,
    title: Optional[str] = None,
) -> List[SuggestedAction]:
    """
    Suggest follow-up actions for classified content

    Every rule is evaluated independently; the combined list is sorted by
    ascending priority (stable, so equal priorities keep rule order) and
    capped at MAX_SUGGESTIONS.

    Args:
        category: Item category
        data: Extracted data bag
        title: Item title, used to pre-fill calendar and reminder payloads

    Returns:
        At most MAX_SUGGESTIONS actions, most urgent first
    """
    actions: List[SuggestedAction] = []
    urgency = data.urgency

    if data.dates:
        first_date = data.dates[0]
        payload = {"date": first_date}
        start = parse_date(first_date)
        if title and start is not None:
            payload["title"] = title
            payload["start_time"] = (start if start.tzinfo else start.astimezone()).isoformat()
        priority = 1 if urgency == Urgency.CRITICAL else 2
        actions.append(_suggestion(ActionType.ADD_TO_CALENDAR, payload, priority))

    if urgency in (Urgency.HIGH, Urgency.CRITICAL):
        payload = {"urgency": urgency.value}
        if title:
            payload["message"] = title
        actions.append(_suggestion(ActionType.SET_REMINDER, payload, 1))

    if data.contacts:
        contact = data.contacts[0].model_dump(exclude_none=True)
        actions.append(_suggestion(ActionType.SAVE_CONTACT, {"contact": contact}, 3))

    if category in (Category.LEARNING, Category.ENTERTAINMENT):
        actions.append(_suggestion(ActionType.SUMMARIZE, {}, 2))

    if data.prices and category == Category.SHOPPING_DEALS:
        price = data.prices[0].model_dump()
        actions.append(_suggestion(ActionType.TRACK_PRICE, {"price": price}, 2))

    actions.sort(key=lambda action: action.priority)
    return actions[:MAX_SUGGESTIONS]
