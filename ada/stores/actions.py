"""
Actions store - the session's local view of the user's actions
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from ada.backend.base import DEFAULT_PAGE_LIMIT, BackendClient, DatabaseError, FunctionError
from ada.models import Action, ActionStatus, ActionType
from ada.models.item import utc_now
from ada.services.actions import ActionExecutor, ActionStateError
from ada.stores.base import OptimisticCollection

PENDING_STATUSES = (ActionStatus.SUGGESTED, ActionStatus.APPROVED)


class ActionsStore:
    """Actions collection with optimistic execution and dismissal"""

    def __init__(self, backend: BackendClient, executor: ActionExecutor, page_limit: int = DEFAULT_PAGE_LIMIT):
        self.backend = backend
        self.executor = executor
        self.page_limit = page_limit
        self.collection: OptimisticCollection[Action] = OptimisticCollection("actions")

    @property
    def actions(self) -> List[Action]:
        return self.collection.records

    @property
    def error(self) -> Optional[str]:
        return self.collection.error

    @property
    def has_more(self) -> bool:
        return self.collection.has_more

    def get(self, action_id: str) -> Optional[Action]:
        return self.collection.get(action_id)

    async def fetch_actions(self, user_id: str) -> None:
        collection = self.collection
        collection.loading, collection.error, collection.has_more = True, None, True
        try:
            actions = await self.backend.get_actions_for_user(user_id, limit=self.page_limit)
            collection.replace_all(actions)
            collection.has_more = len(actions) >= self.page_limit
        except DatabaseError as e:
            collection.error = e.message
        except Exception as e:
            logger.exception(f"Failed to load actions: {e}")
            collection.error = "Failed to load actions."
        finally:
            collection.loading = False

    async def load_more(self, user_id: str) -> None:
        collection = self.collection
        if collection.loading or not collection.has_more:
            return

        collection.loading, collection.error = True, None
        try:
            more = await self.backend.get_actions_for_user(user_id, limit=self.page_limit, offset=len(collection))
            collection.extend(more)
            collection.has_more = len(more) >= self.page_limit
        except DatabaseError as e:
            collection.error = e.message
        except Exception as e:
            logger.exception(f"Failed to load more actions: {e}")
            collection.error = "Failed to load more actions."
        finally:
            collection.loading = False

    async def execute_and_update(self, action: Action) -> Dict[str, Any]:
        """
        Execute an action, showing its outcome before the platform confirms it

        Summarize goes to approved (the remote side completes it later),
        everything else to completed.

        Args:
            action: Action to execute

        Returns:
            The executor's result payload

        Raises:
            ActionStateError: If the action is already terminal; nothing is touched
            ActionError: Or any other executor failure, after rolling back
            FunctionError: If the remote summarize failed; the action is re-read from the backend
        """
        current = self.collection.get(action.id) or action
        if ActionStatus(current.status).is_terminal:
            raise ActionStateError(f"Action is already {ActionStatus(current.status).value}")

        optimistic = ActionStatus.APPROVED if action.type == ActionType.SUMMARIZE else ActionStatus.COMPLETED

        def refine(result: Dict[str, Any]) -> None:
            if optimistic == ActionStatus.COMPLETED:
                self.collection.update_where(action.id, result=result, completed_at=utc_now())

        try:
            return await self.collection.mutate(
                f"Execute {action.type}",
                lambda: self.collection.update_where(action.id, status=optimistic),
                lambda: self.executor.execute(action),
                reraise=True,
                on_success=refine,
            )
        except FunctionError:
            # The remote function may already have recorded the failure
            await self.refresh_action(action)
            raise

    async def refresh_action(self, action: Action) -> None:
        try:
            remote = await self.backend.get_actions_for_item(action.item_id)
        except Exception as e:
            logger.error(f"Failed to refresh action {action.id}: {e}")
            return
        updated = next((record for record in remote if record.id == action.id), None)
        if updated is not None and self.collection.get(action.id) is not None:
            self.collection.upsert(updated)

    async def dismiss_action(self, action_id: str) -> None:
        action = self.collection.get(action_id)
        if action is not None and not ActionStatus(action.status).can_transition_to(ActionStatus.DISMISSED):
            logger.warning(f"Action {action_id} is {action.status.value} and cannot be dismissed")
            return

        await self.collection.mutate(
            "Dismiss",
            lambda: self.collection.update_where(action_id, status=ActionStatus.DISMISSED),
            lambda: self.backend.update_action_status(action_id, ActionStatus.DISMISSED),
        )

    # Derived views

    def pending(self) -> List[Action]:
        return [action for action in self.actions if action.status in PENDING_STATUSES]

    def completed(self) -> List[Action]:
        return [action for action in self.actions if action.status == ActionStatus.COMPLETED]

    def for_item(self, item_id: str) -> List[Action]:
        return [
            action for action in self.actions
            if action.item_id == item_id and action.status != ActionStatus.DISMISSED
        ]
