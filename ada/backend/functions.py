"""
Server-side functions behind trigger_classify and trigger_summarize

Classify pipeline:
1. Fetch item
2. If URL, fetch readable page content
3. Classify with the AI (heuristic fallback when the AI is unavailable)
4. Update item with the classification
5. Create suggested action rows
6. Notify subscribers via realtime

Summarize pipeline:
1. Fetch item and its content
2. Summarize with the AI
3. Copy the summary into the item description, then complete the action
"""
from typing import Optional
from uuid import uuid4

from loguru import logger

from ada.backend.base import BackendClient, FunctionError
from ada.backend.realtime import ITEM_UPDATED, RealtimeHub, items_channel
from ada.config import Settings
from ada.models import Action, ActionStatus, ClassificationResult, ContentType, Item, ItemStatus
from ada.services.ai_classifier import AIClassifierService, ClassificationError
from ada.services.classifier import classify_heuristic
from ada.services.content_fetcher import ContentFetcher
from ada.services.summarizer import SummarizerService

SUMMARY_DESCRIPTION_LENGTH = 1000


def publish_item(hub: RealtimeHub, item: Item) -> None:
    hub.publish(items_channel(item.user_id), ITEM_UPDATED, {"item": item.model_dump(mode="json")})


class ClassifyFunction:
    """Classifies a pending item and persists the result"""

    def __init__(
        self,
        backend: BackendClient,
        hub: RealtimeHub,
        settings: Settings,
        fetcher: Optional[ContentFetcher] = None,
        classifier: Optional[AIClassifierService] = None,
    ):
        """
        Initialize the classify function

        Args:
            backend: System of record
            hub: Realtime hub used to announce the classified item
            settings: Application settings
            fetcher: Page content fetcher for links
            classifier: AI classifier; heuristics only when None
        """
        self.backend = backend
        self.hub = hub
        self.settings = settings
        self.fetcher = fetcher or ContentFetcher(settings)
        self.classifier = classifier

    async def __call__(self, item_id: str) -> Item:
        """
        Classify an item

        Args:
            item_id: Item to classify

        Returns:
            The updated item

        Raises:
            FunctionError: If the item is missing or cannot be updated
        """
        logger.info(f"Step 1: Fetching item {item_id}")
        item = await self.backend.get_item_by_id(item_id)
        if item is None:
            raise FunctionError(f"Item not found: {item_id}")

        if item.status != ItemStatus.PENDING:
            logger.info(f"Item {item_id} is {item.status.value}, skipping classification")
            return item

        classification = await self._classify(item)

        logger.info(f"Step 4: Updating item {item_id} as {classification.category.value}")
        try:
            updated = await self.backend.update_item(item_id, {
                "category": classification.category,
                "title": classification.title,
                "description": classification.description,
                "extracted_data": classification.extracted_data.to_bag(),
                "suggested_actions": [action.model_dump() for action in classification.suggested_actions],
                "confidence": classification.confidence,
                "status": ItemStatus.CLASSIFIED,
            })
        except Exception as e:
            logger.exception(f"Item update failed: {e}")
            raise FunctionError("Failed to update item", e)

        if classification.suggested_actions:
            logger.info(f"Step 5: Creating {len(classification.suggested_actions)} actions")
            rows = [
                Action(
                    id=str(uuid4()),
                    user_id=item.user_id,
                    item_id=item_id,
                    type=suggestion.type,
                    status=ActionStatus.SUGGESTED,
                    action_data={"label": suggestion.label, **suggestion.data},
                )
                for suggestion in classification.suggested_actions
            ]
            try:
                await self.backend.create_actions(rows)
            except Exception as e:
                logger.error(f"Failed to create actions: {e}")

        logger.info("Step 6: Notifying subscribers")
        publish_item(self.hub, updated)
        return updated

    async def _classify(self, item: Item) -> ClassificationResult:
        if self.classifier is None:
            logger.info("Step 2-3: AI not configured, using heuristic classification")
            return classify_heuristic(item.raw_content, item.type, currency=self.settings.default_currency)

        if item.type == ContentType.LINK:
            logger.info("Step 2: Fetching link content")
            text = await self.fetcher.fetch_or_url(item.raw_content)
        else:
            text = item.raw_content

        try:
            logger.info("Step 3: Classifying with AI")
            return await self.classifier.classify(text, item.type)
        except ClassificationError as e:
            logger.warning(f"AI classification failed, using heuristics: {e.message}")
            return classify_heuristic(item.raw_content, item.type, currency=self.settings.default_currency)


class SummarizeFunction:
    """Summarizes an item on behalf of an approved summarize action"""

    def __init__(
        self,
        backend: BackendClient,
        hub: RealtimeHub,
        settings: Settings,
        fetcher: Optional[ContentFetcher] = None,
        summarizer: Optional[SummarizerService] = None,
    ):
        self.backend = backend
        self.hub = hub
        self.settings = settings
        self.fetcher = fetcher or ContentFetcher(settings)
        self.summarizer = summarizer

    async def __call__(self, item_id: str, action_id: str) -> str:
        """
        Summarize an item and complete the action

        On any failure the action is marked failed with the error message.

        Returns:
            The summary text

        Raises:
            FunctionError: If summarization failed
        """
        try:
            return await self._run(item_id, action_id)
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or "Unknown error"
            logger.exception(f"Summarize function error: {message}")
            try:
                await self.backend.update_action_status(action_id, ActionStatus.FAILED, {"error": message})
            except Exception as cleanup_error:
                logger.warning(f"Failed to mark action {action_id} as failed: {cleanup_error}")
            raise FunctionError(f"Summarize failed: {message}", e)

    async def _run(self, item_id: str, action_id: str) -> str:
        if self.summarizer is None:
            raise FunctionError("AI summarization is not configured (set BASE_URL and API_KEY)")

        logger.info(f"Step 1: Fetching item {item_id}")
        item = await self.backend.get_item_by_id(item_id)
        if item is None:
            raise FunctionError(f"Item not found: {item_id}")

        if item.type == ContentType.LINK:
            content = await self.fetcher.fetch_or_url(item.raw_content)
        else:
            content = item.raw_content

        logger.info("Step 2: Summarizing")
        summary = await self.summarizer.summarize(content)

        logger.info(f"Step 3: Describing item {item_id} and completing action {action_id}")
        updated = await self.backend.update_item(item_id, {"description": summary[:SUMMARY_DESCRIPTION_LENGTH]})
        await self.backend.update_action_status(action_id, ActionStatus.COMPLETED, {"summary": summary})
        publish_item(self.hub, updated)
        return summary
