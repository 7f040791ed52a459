"""
AI classification service using an OpenAI-compatible API with Instructor
Produces the same ClassificationResult shape as the heuristic classifier
"""
import base64
import os
from typing import Optional, Union

import instructor
from loguru import logger
from openai import AsyncOpenAI

from ada.config import Settings
from ada.errors import AdaError
from ada.models import ActionType, ClassificationResult, ContentType

IMAGE_TYPES = (ContentType.IMAGE, ContentType.SCREENSHOT)

# The only action types the model is allowed to propose
AI_ACTION_TYPES = frozenset({ActionType.ADD_TO_CALENDAR, ActionType.SET_REMINDER, ActionType.SUMMARIZE})

CLASSIFY_PROMPT = """You are Ada, an AI personal secretary. Classify this content.

Categories: events_plans, food_dining, shopping_deals, travel, jobs_career,
learning, entertainment, health_fitness, finance, social, inspiration, other.

Action data schemas (MUST match exactly):
- add_to_calendar: {"title": "event title", "start_time": "ISO 8601", "end_time": "ISO 8601 or omit for 1hr default", "location": "optional", "description": "optional", "all_day": false}
- set_reminder: {"message": "reminder text", "remind_at": "ISO 8601 future date", "urgency": "low|medium|high|critical"}
- summarize: {} (no data needed)

Rules:
- Extract ALL structured data (dates, prices, contacts, locations)
- Only suggest actions of type: add_to_calendar, set_reminder, summarize
- Suggest add_to_calendar when dates/events are found (include start_time!)
- Suggest set_reminder when deadlines or urgency detected (include remind_at!)
- Suggest summarize for long-form content (articles, papers, emails)
- Suggest at most 3 actions, priority 1 (most urgent) to 3
- If content has a deadline within 7 days, urgency should be "high" or "critical"
- Confidence should reflect how certain you are about the category
- Keep title concise and informative, max 60 characters
- Only include fields where you found actual data
- For images/screenshots: extract ALL visible text as ocr_text in extracted_data
- Use the visible text to determine category and suggest actions"""


class ClassificationError(AdaError):
    """Raised when the AI classifier fails or returns an unusable response"""
    pass


class AIClassifierService:
    """AI classifier service producing structured classifications"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        """
        Initialize AI classifier service

        Args:
            settings: Application settings (if None, will load from environment)
            client: Preconfigured OpenAI client; built from settings when omitted
        """
        if settings is None:
            from ada.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.base_url = settings.llm_base_url

        logger.info(f"Initializing AI classifier with base_url: {self.base_url}")
        logger.info(f"Model: {settings.classify_model}")

        if client is None:
            # base_url already carries the /v1 suffix from settings
            client = AsyncOpenAI(
                base_url=self.base_url,
                api_key=settings.llm_api_key,
                timeout=settings.llm_timeout,
            )

        # Patch client with Instructor for structured output
        self.client = instructor.patch(client)

    async def classify(
        self,
        content: str,
        content_type: Union[ContentType, str] = ContentType.TEXT,
    ) -> ClassificationResult:
        """
        Classify content with the LLM

        Args:
            content: Text to classify (page content for links, a file path for images)
            content_type: How the content was shared

        Returns:
            ClassificationResult validated by Instructor

        Raises:
            ClassificationError: If the API call or response validation fails
        """
        content_type = ContentType(content_type)
        prompt = f"{CLASSIFY_PROMPT}\n\nContent type: {content_type.value}\nContent:\n{content}"

        user_content = prompt
        image_url = self._image_data_url(content) if content_type in IMAGE_TYPES else None
        if image_url:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]

        try:
            logger.info(f"Calling LLM API - Model: {self.settings.classify_model}")
            logger.debug(f"Prompt length: {len(prompt)} characters")

            result = await self.client.chat.completions.create(
                model=self.settings.classify_model,
                response_model=ClassificationResult,
                messages=[
                    {"role": "system", "content": "You classify shared content and propose follow-up actions."},
                    {"role": "user", "content": user_content},
                ],
                temperature=self.settings.llm_temperature,
                max_retries=self.settings.llm_max_retries,
                max_tokens=self.settings.llm_max_tokens,
            )

            result.suggested_actions = [
                action for action in result.suggested_actions if action.type in AI_ACTION_TYPES
            ]
            logger.info(f"Classified as {result.category.value} ({result.confidence:.2f}): {result.title}")
            return result

        except Exception as e:
            logger.exception(f"Error classifying content with AI: {e}")
            raise ClassificationError(describe_llm_error(e, self.base_url, self.settings.llm_max_tokens), e)

    @staticmethod
    def _image_data_url(path: str) -> Optional[str]:
        """Inline a local image as a data URL, or None if it is not a readable file"""
        if not path or not os.path.isfile(path):
            return None
        try:
            with open(path, "rb") as handle:
                encoded = base64.b64encode(handle.read()).decode("ascii")
        except OSError as e:
            logger.warning(f"Image read failed for {path}: {e}")
            return None
        return f"data:image/jpeg;base64,{encoded}"


def describe_llm_error(error: Exception, base_url: str, max_tokens: int) -> str:
    """Turn a raw client error into a message with a configuration hint"""
    error_msg = str(error)
    lowered = error_msg.lower()

    if "404" in error_msg or "not found" in lowered:
        return (
            f"API endpoint not found (404): {error_msg}\n"
            f"BASE_URL must include the /v1 suffix. Current value: {base_url}"
        )
    if "401" in error_msg or "unauthorized" in lowered:
        return "API authentication failed (401): check API_KEY"
    if "timeout" in lowered or "timed out" in lowered:
        return "API request timed out: check the network or raise LLM_TIMEOUT"
    if "max_tokens" in lowered or "length limit" in lowered:
        return f"Output length exceeded (LLM_MAX_TOKENS={max_tokens}): {error_msg}"
    return f"AI processing failed: {error_msg}"
