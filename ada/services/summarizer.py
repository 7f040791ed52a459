"""
Summarization service using an OpenAI-compatible API
"""
from typing import Optional

from loguru import logger
from openai import AsyncOpenAI

from ada.config import Settings
from ada.services.ai_classifier import describe_llm_error
from ada.errors import AdaError

SUMMARIZE_PROMPT = """Summarize the following content concisely.

Provide:
1. A 2-3 sentence executive summary
2. 3-5 key bullet points
3. Any action items mentioned

Keep the total response under 300 words."""

SUMMARY_TEMPERATURE = 0.3


class SummarizationError(AdaError):
    pass


class SummarizerService:
    """Plain chat completion producing a short summary"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        if settings is None:
            from ada.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.client = client or AsyncOpenAI(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            timeout=settings.llm_timeout,
        )

    async def summarize(self, content: str) -> str:
        """
        Summarize content

        Args:
            content: Text to summarize

        Returns:
            Summary text, possibly empty if the model returned nothing

        Raises:
            SummarizationError: If the API call fails
        """
        try:
            logger.info(f"Calling LLM API for summary - Model: {self.settings.summarize_model}")
            response = await self.client.chat.completions.create(
                model=self.settings.summarize_model,
                messages=[{"role": "user", "content": f"{SUMMARIZE_PROMPT}\n\nContent:\n{content}"}],
                temperature=SUMMARY_TEMPERATURE,
                max_tokens=self.settings.llm_max_tokens,
            )
        except Exception as e:
            logger.exception(f"Error summarizing content: {e}")
            raise SummarizationError(
                describe_llm_error(e, self.settings.llm_base_url, self.settings.llm_max_tokens), e
            )

        summary = (response.choices[0].message.content or "").strip() if response.choices else ""
        logger.info(f"Summary generated, length: {len(summary)} characters")
        return summary
