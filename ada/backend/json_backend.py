"""
Local system of record backed by JSON tables
Items and actions live in {data_dir}/items.json and {data_dir}/actions.json
"""
import asyncio
from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from ada.backend.base import (
    DEFAULT_PAGE_LIMIT,
    BackendClient,
    DatabaseError,
    FunctionError,
    ItemListener,
    Unsubscribe,
)
from ada.backend.functions import ClassifyFunction, SummarizeFunction
from ada.backend.realtime import ITEM_CREATED, ITEM_EVENTS, RealtimeHub, items_channel
from ada.config import Settings
from ada.models import Action, ActionStatus, Category, Item, ItemStatus, RawCapture
from ada.models.item import utc_now
from ada.utils.json_tables import JsonTables

ITEMS_TABLE = "items"
ACTIONS_TABLE = "actions"


class JsonBackend(BackendClient):
    """BackendClient over JSON files, with in-process functions and realtime"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        hub: Optional[RealtimeHub] = None,
        base_dir: Optional[str] = None,
    ):
        """
        Initialize the JSON backend

        Args:
            settings: Application settings (if None, will load from environment)
            hub: Realtime hub shared with subscribers; a private one is created when omitted
            base_dir: Table directory; defaults to settings.data_dir
        """
        if settings is None:
            from ada.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.base_dir = base_dir or settings.data_dir
        self.tables = JsonTables(self.base_dir, DatabaseError)
        self.hub = hub or RealtimeHub()
        self._tasks: Set[asyncio.Task] = set()

        classifier = summarizer = None
        if settings.llm_configured:
            from ada.services.ai_classifier import AIClassifierService
            from ada.services.summarizer import SummarizerService
            classifier = AIClassifierService(settings)
            summarizer = SummarizerService(settings)

        self.classify_function = ClassifyFunction(self, self.hub, settings, classifier=classifier)
        self.summarize_function = SummarizeFunction(self, self.hub, settings, summarizer=summarizer)

    # Items

    async def save_item(self, user_id: str, capture: RawCapture) -> Item:
        now = utc_now()
        item = Item(
            id=str(uuid4()),
            user_id=user_id,
            type=capture.type,
            raw_content=capture.content,
            status=ItemStatus.PENDING,
            source_app=capture.source_app,
            user_note=capture.user_input,
            created_at=now,
            updated_at=now,
        )
        rows = self.tables.read(ITEMS_TABLE)
        rows.append(item.model_dump(mode="json"))
        self.tables.write(ITEMS_TABLE, rows)

        self.hub.publish(items_channel(user_id), ITEM_CREATED, {"item": item.model_dump(mode="json")})
        return item

    async def get_items(
        self,
        user_id: str,
        status: Optional[ItemStatus] = None,
        category: Optional[Category] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> List[Item]:
        items = [
            item for item in self._load(ITEMS_TABLE, Item)
            if item.user_id == user_id
            and (status is None or item.status == status)
            and (category is None or item.category == category)
        ]
        return _newest_first(items)[offset:offset + limit]

    async def get_item_by_id(self, item_id: str) -> Optional[Item]:
        for item in self._load(ITEMS_TABLE, Item):
            if item.id == item_id:
                return item
        return None

    async def update_item(self, item_id: str, updates: Dict[str, Any]) -> Item:
        rows = self.tables.read(ITEMS_TABLE)
        for index, row in enumerate(rows):
            if row.get("id") != item_id:
                continue
            merged = {**row, **to_jsonable_python(updates), "updated_at": utc_now().isoformat()}
            try:
                item = Item.model_validate(merged)
            except ValidationError as e:
                raise DatabaseError("Failed to update item", e)
            rows[index] = item.model_dump(mode="json")
            self.tables.write(ITEMS_TABLE, rows)
            return item
        raise DatabaseError("Update returned no data")

    async def archive_item(self, item_id: str) -> None:
        await self.update_item(item_id, {"status": ItemStatus.ARCHIVED})

    async def delete_item(self, item_id: str) -> None:
        rows = self.tables.read(ITEMS_TABLE)
        remaining = [row for row in rows if row.get("id") != item_id]
        if len(remaining) == len(rows):
            raise DatabaseError(f"Failed to delete item: {item_id} not found")
        self.tables.write(ITEMS_TABLE, remaining)

        actions = self.tables.read(ACTIONS_TABLE)
        self.tables.write(ACTIONS_TABLE, [row for row in actions if row.get("item_id") != item_id])

    async def toggle_star(self, item_id: str, starred: bool) -> Item:
        return await self.update_item(item_id, {"is_starred": starred})

    async def update_user_note(self, item_id: str, note: Optional[str]) -> Item:
        return await self.update_item(item_id, {"user_note": note})

    # Actions

    async def create_actions(self, actions: List[Action]) -> List[Action]:
        rows = self.tables.read(ACTIONS_TABLE)
        rows.extend(action.model_dump(mode="json") for action in actions)
        self.tables.write(ACTIONS_TABLE, rows)
        return list(actions)

    async def get_actions_for_item(self, item_id: str) -> List[Action]:
        actions = [action for action in self._load(ACTIONS_TABLE, Action) if action.item_id == item_id]
        return sorted(actions, key=lambda action: action.created_at)

    async def get_actions_for_user(
        self,
        user_id: str,
        status: Optional[ActionStatus] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> List[Action]:
        actions = [
            action for action in self._load(ACTIONS_TABLE, Action)
            if action.user_id == user_id and (status is None or action.status == status)
        ]
        return _newest_first(actions)[offset:offset + limit]

    async def update_action_status(
        self,
        action_id: str,
        status: ActionStatus,
        result: Optional[Dict[str, Any]] = None,
    ) -> None:
        rows = self.tables.read(ACTIONS_TABLE)
        for row in rows:
            if row.get("id") != action_id:
                continue
            current = ActionStatus(row["status"])
            if not current.can_transition_to(status):
                raise DatabaseError(
                    f"Cannot move action {action_id} from {current.value} to {ActionStatus(status).value}"
                )
            row["status"] = ActionStatus(status).value
            if status == ActionStatus.COMPLETED:
                row["completed_at"] = utc_now().isoformat()
            if result:
                row["result"] = to_jsonable_python(result)
            self.tables.write(ACTIONS_TABLE, rows)
            return
        raise DatabaseError(f"Failed to update action: {action_id} not found")

    # Functions

    async def trigger_classify(self, item_id: str) -> None:
        task = asyncio.create_task(self.classify_function(item_id))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    async def trigger_summarize(self, item_id: str, action_id: str) -> None:
        # SummarizeFunction already wraps its failures in FunctionError
        try:
            await self.summarize_function(item_id, action_id)
        except FunctionError:
            raise
        except Exception as e:
            raise FunctionError("Summarize failed", e)

    async def drain(self) -> None:
        """Wait for every background function started so far"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Classify trigger failed: {error}")

    # Realtime

    def subscribe_to_items(self, user_id: str, on_update: ItemListener) -> Unsubscribe:
        def handle(event: str, payload: Dict[str, Any]) -> None:
            if event not in ITEM_EVENTS or not payload.get("item"):
                return
            on_update(Item.model_validate(payload["item"]))

        return self.hub.subscribe(items_channel(user_id), handle)

    # Tables

    def _load(self, name: str, model):
        try:
            return [model.model_validate(row) for row in self.tables.read(name)]
        except ValidationError as e:
            raise DatabaseError(f"Corrupt row in {name} table", e)


def _newest_first(records: list) -> list:
    # Later rows win ties on created_at
    indexed = list(enumerate(records))
    indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
    return [record for _, record in indexed]
