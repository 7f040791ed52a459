"""
In-process realtime hub
Channels are named items:{user_id}; events carry {"item": {...}}
"""
from collections import defaultdict
from typing import Any, Callable, Dict, List

from loguru import logger

ITEM_CREATED = "item_created"
ITEM_UPDATED = "item_updated"
ITEM_EVENTS = (ITEM_CREATED, ITEM_UPDATED)

Handler = Callable[[str, Dict[str, Any]], None]


def items_channel(user_id: str) -> str:
    return f"items:{user_id}"


class RealtimeHub:
    """Fan-out of published events to channel subscribers"""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, channel: str, handler: Handler) -> Callable[[], None]:
        """
        Subscribe a handler to a channel

        Returns:
            Callable that removes the subscription; calling it twice is harmless
        """
        self._subscribers[channel].append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(channel, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        """Deliver an event to every current subscriber of the channel"""
        for handler in list(self._subscribers.get(channel, [])):
            try:
                handler(event, payload)
            except Exception as e:
                logger.warning(f"Realtime handler failed on {channel}/{event}: {e}")

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, []))
