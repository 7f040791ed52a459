"""
Session - owns the local collections for one signed-in user
"""
import asyncio
from typing import Callable, Optional

from loguru import logger

from ada.backend.base import DEFAULT_PAGE_LIMIT, BackendClient
from ada.services.actions import ActionExecutor
from ada.stores.actions import ActionsStore
from ada.stores.items import ItemsStore


class Session:
    """Builds fresh stores on sign-in and discards them on sign-out"""

    def __init__(self, backend: BackendClient, executor: ActionExecutor, page_limit: int = DEFAULT_PAGE_LIMIT):
        self.backend = backend
        self.executor = executor
        self.page_limit = page_limit
        self.user_id: Optional[str] = None
        self.items: Optional[ItemsStore] = None
        self.actions: Optional[ActionsStore] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def signed_in(self) -> bool:
        return self.user_id is not None

    async def sign_in(self, user_id: str) -> None:
        """
        Start a session for a user

        Any previous session is signed out first. Items and actions are
        fetched concurrently, then realtime item updates are merged in.
        """
        if self.signed_in:
            self.sign_out()

        logger.info(f"Signing in {user_id}")
        self.user_id = user_id
        self.items = ItemsStore(self.backend, self.page_limit)
        self.actions = ActionsStore(self.backend, self.executor, self.page_limit)

        await asyncio.gather(
            self.items.fetch_items(user_id),
            self.actions.fetch_actions(user_id),
        )
        self._unsubscribe = self.items.start_realtime(user_id)

    def sign_out(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        logger.info(f"Signing out {self.user_id}")
        self.user_id = None
        self.items = None
        self.actions = None
