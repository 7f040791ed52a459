"""
System-of-record interface
All item, action, function and realtime calls go through a BackendClient
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from ada.errors import AdaError
from ada.models import Action, ActionStatus, Category, Item, ItemStatus, RawCapture

DEFAULT_PAGE_LIMIT = 50

ItemListener = Callable[[Item], None]
Unsubscribe = Callable[[], None]


class DatabaseError(AdaError):
    """Raised when a read or write against the system of record fails"""
    pass


class FunctionError(AdaError):
    """Raised when a remote function invocation fails"""
    pass


class BackendClient(ABC):
    """
    Async client for the system of record

    Implementations raise DatabaseError for storage failures and
    FunctionError for remote function failures.
    """

    # Items

    @abstractmethod
    async def save_item(self, user_id: str, capture: RawCapture) -> Item:
        """Insert a new pending item for the capture"""
        raise NotImplementedError

    @abstractmethod
    async def get_items(
        self,
        user_id: str,
        status: Optional[ItemStatus] = None,
        category: Optional[Category] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> List[Item]:
        """List a user's items newest first"""
        raise NotImplementedError

    @abstractmethod
    async def get_item_by_id(self, item_id: str) -> Optional[Item]:
        raise NotImplementedError

    @abstractmethod
    async def update_item(self, item_id: str, updates: Dict[str, Any]) -> Item:
        raise NotImplementedError

    @abstractmethod
    async def archive_item(self, item_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_item(self, item_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def toggle_star(self, item_id: str, starred: bool) -> Item:
        raise NotImplementedError

    @abstractmethod
    async def update_user_note(self, item_id: str, note: Optional[str]) -> Item:
        raise NotImplementedError

    # Actions

    @abstractmethod
    async def create_actions(self, actions: List[Action]) -> List[Action]:
        raise NotImplementedError

    @abstractmethod
    async def get_actions_for_item(self, item_id: str) -> List[Action]:
        """List an item's actions oldest first"""
        raise NotImplementedError

    @abstractmethod
    async def get_actions_for_user(
        self,
        user_id: str,
        status: Optional[ActionStatus] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> List[Action]:
        """List a user's actions newest first"""
        raise NotImplementedError

    @abstractmethod
    async def update_action_status(
        self,
        action_id: str,
        status: ActionStatus,
        result: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Persist a status change; completed also stamps completed_at, illegal transitions raise DatabaseError"""
        raise NotImplementedError

    # Functions

    @abstractmethod
    async def trigger_classify(self, item_id: str) -> None:
        """Start classification without waiting; failures are logged, not raised"""
        raise NotImplementedError

    @abstractmethod
    async def trigger_summarize(self, item_id: str, action_id: str) -> None:
        """Start summarization; raises FunctionError if the call fails"""
        raise NotImplementedError

    # Realtime

    @abstractmethod
    def subscribe_to_items(self, user_id: str, on_update: ItemListener) -> Unsubscribe:
        """Receive item_created and item_updated pushes for a user"""
        raise NotImplementedError
