"""
Items store - the session's local view of the user's items
"""
from typing import Callable, List, Optional

from loguru import logger

from ada.backend.base import DEFAULT_PAGE_LIMIT, BackendClient, DatabaseError
from ada.models import Category, Item, ItemStatus
from ada.stores.base import OptimisticCollection


class ItemsStore:
    """Items collection with optimistic mutations and realtime merge"""

    def __init__(self, backend: BackendClient, page_limit: int = DEFAULT_PAGE_LIMIT):
        self.backend = backend
        self.page_limit = page_limit
        self.collection: OptimisticCollection[Item] = OptimisticCollection("items")

    @property
    def items(self) -> List[Item]:
        return self.collection.records

    @property
    def error(self) -> Optional[str]:
        return self.collection.error

    @property
    def loading(self) -> bool:
        return self.collection.loading

    @property
    def has_more(self) -> bool:
        return self.collection.has_more

    def get(self, item_id: str) -> Optional[Item]:
        return self.collection.get(item_id)

    # Loading

    async def fetch_items(self, user_id: str) -> None:
        collection = self.collection
        collection.loading, collection.error, collection.has_more = True, None, True
        try:
            items = await self.backend.get_items(user_id, limit=self.page_limit)
            collection.replace_all(items)
            collection.has_more = len(items) >= self.page_limit
        except DatabaseError as e:
            collection.error = e.message
        except Exception as e:
            logger.exception(f"Failed to load items: {e}")
            collection.error = "Failed to load items."
        finally:
            collection.loading = False

    async def load_more(self, user_id: str) -> None:
        collection = self.collection
        if collection.loading or not collection.has_more:
            return

        collection.loading, collection.error = True, None
        try:
            more = await self.backend.get_items(user_id, limit=self.page_limit, offset=len(collection))
            collection.extend(more)
            collection.has_more = len(more) >= self.page_limit
        except DatabaseError as e:
            collection.error = e.message
        except Exception as e:
            logger.exception(f"Failed to load more items: {e}")
            collection.error = "Failed to load more items."
        finally:
            collection.loading = False

    def prepend_item(self, item: Item) -> None:
        self.collection.upsert(item)

    async def refresh_item(self, item_id: str) -> None:
        try:
            updated = await self.backend.get_item_by_id(item_id)
        except Exception as e:
            logger.error(f"Failed to refresh item {item_id}: {e}")
            return
        if updated is not None and self.collection.get(item_id) is not None:
            self.collection.upsert(updated)

    # Fire-and-forget mutations

    async def archive_item(self, item_id: str) -> None:
        item = self.collection.get(item_id)
        if item is not None and not ItemStatus(item.status).can_transition_to(ItemStatus.ARCHIVED):
            logger.warning(f"Item {item_id} is {item.status.value} and cannot be archived")
            return

        await self.collection.mutate(
            "Archive",
            lambda: self.collection.update_where(item_id, status=ItemStatus.ARCHIVED),
            lambda: self.backend.archive_item(item_id),
        )

    async def delete_item(self, item_id: str) -> None:
        await self.collection.mutate(
            "Delete",
            lambda: self.collection.remove(item_id),
            lambda: self.backend.delete_item(item_id),
        )

    async def toggle_star(self, item_id: str) -> None:
        item = self.collection.get(item_id)
        if item is None:
            return

        starred = not item.is_starred
        await self.collection.mutate(
            "Toggle star",
            lambda: self.collection.update_where(item_id, is_starred=starred),
            lambda: self.backend.toggle_star(item_id, starred),
        )

    async def update_note(self, item_id: str, note: Optional[str]) -> None:
        await self.collection.mutate(
            "Update note",
            lambda: self.collection.update_where(item_id, user_note=note),
            lambda: self.backend.update_user_note(item_id, note),
        )

    # Caller-visible mutations

    async def reclassify(self, item_id: str) -> None:
        """
        Reset an item to pending and classify it again

        Raises:
            Exception: Whatever the backend raised; local state is rolled back first
        """
        async def remote() -> None:
            await self.backend.update_item(item_id, {
                "status": ItemStatus.PENDING,
                "category": None,
                "confidence": None,
            })
            await self.backend.trigger_classify(item_id)

        await self.collection.mutate(
            "Reclassify",
            lambda: self.collection.update_where(
                item_id, status=ItemStatus.PENDING, category=None, confidence=None
            ),
            remote,
            reraise=True,
        )

    # Realtime

    def apply_realtime(self, item: Item) -> None:
        self.collection.apply_push(item)

    def start_realtime(self, user_id: str) -> Callable[[], None]:
        """Merge pushed items into the collection until the returned callable is invoked"""
        logger.info(f"Subscribing to item updates for {user_id}")
        return self.backend.subscribe_to_items(user_id, self.apply_realtime)

    # Derived views

    def by_status(self, status: ItemStatus) -> List[Item]:
        return [item for item in self.items if item.status == status]

    def by_category(self, category: Category) -> List[Item]:
        return [
            item for item in self.items
            if item.category == category and item.status != ItemStatus.ARCHIVED
        ]

    def starred(self) -> List[Item]:
        return [item for item in self.items if item.is_starred and item.status != ItemStatus.ARCHIVED]

    def search(self, query: str) -> List[Item]:
        lower = query.lower()
        results = []
        for item in self.items:
            if item.status == ItemStatus.ARCHIVED:
                continue
            fields = [
                item.title,
                item.description,
                item.raw_content,
                item.category.value if item.category else None,
                item.source_app,
                item.user_note,
            ]
            searchable = " ".join(field for field in fields if field).lower()
            if lower in searchable:
                results.append(item)
        return results
