"""
Content fetching service
Turns a shared URL into readable text for the AI classifier and summarizer

Strategy:
1. Reader endpoint ({READER_URL}/{url}) returning plain text
2. Direct page fetch with trafilatura extraction
3. Direct page fetch with BeautifulSoup cleanup + markdownify
"""
import re
from typing import Optional

import httpx
import trafilatura
from bs4 import BeautifulSoup
from loguru import logger
from markdownify import markdownify as md

from ada.config import Settings
from ada.errors import AdaError

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

MIN_EXTRACTED_LENGTH = 100
MIN_FALLBACK_LENGTH = 50

NOISE_TAGS = [
    'script', 'style', 'svg', 'nav', 'footer', 'header', 'aside',
    'button', 'noscript', 'iframe', 'embed', 'object', 'canvas',
]


class ContentFetchError(AdaError):
    """Raised when no strategy produced usable content"""
    pass


class ContentFetcher:
    """Fetches readable page content with a layered fallback strategy"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize content fetcher

        Args:
            settings: Application settings (if None, will load from environment)
            client: Shared HTTP client; one is created per call when omitted
        """
        if settings is None:
            from ada.config import get_settings
            settings = get_settings()

        self.settings = settings
        self.client = client

    async def fetch(self, url: str) -> str:
        """
        Fetch readable content for a URL

        Args:
            url: Page URL

        Returns:
            Text or Markdown content, truncated to max_content_length

        Raises:
            ContentFetchError: If every strategy failed
        """
        logger.info(f"Fetching content from: {url}")

        if self.client is not None:
            content = await self._fetch_all(self.client, url)
        else:
            async with httpx.AsyncClient(
                timeout=self.settings.reader_timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                content = await self._fetch_all(client, url)

        content = clean_markdown(content)[:self.settings.max_content_length]
        logger.info(f"Fetched content, length: {len(content)} characters")
        return content

    async def fetch_or_url(self, url: str) -> str:
        """Fetch content, returning the URL itself when fetching fails"""
        try:
            return await self.fetch(url)
        except ContentFetchError as e:
            logger.warning(f"Content fetch failed, using raw URL: {e}")
            return url

    async def _fetch_all(self, client: httpx.AsyncClient, url: str) -> str:
        text = await self._fetch_reader(client, url)
        if text:
            return text

        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ContentFetchError(f"Failed to fetch page: {url} - {e}", e)

        html = response.text
        markdown = self._extract_with_trafilatura(html, url)
        if markdown:
            return markdown

        logger.warning("Using body fallback conversion")
        markdown = md(
            preprocess_html(html),
            heading_style="ATX",
            bullets="-",
        )
        if not markdown or len(markdown.strip()) < MIN_FALLBACK_LENGTH:
            raise ContentFetchError(f"All extraction methods returned insufficient content: {url}")
        return markdown

    async def _fetch_reader(self, client: httpx.AsyncClient, url: str) -> Optional[str]:
        """
        Fetch plain text through the reader endpoint

        Returns:
            Reader text, or None if the reader failed
        """
        try:
            response = await client.get(
                f"{self.settings.reader_url}/{url}",
                headers={"Accept": "text/plain", "X-With-Images": "false", "X-With-Links": "false"},
                timeout=self.settings.reader_timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Reader request failed for {url}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Reader returned {response.status_code} for {url}")
            return None

        text = response.text.strip()
        return text or None

    def _extract_with_trafilatura(self, html: str, url: str) -> Optional[str]:
        try:
            markdown = trafilatura.extract(html, output_format='markdown', url=url)
        except Exception as e:
            logger.warning(f"Trafilatura extraction failed: {e}")
            return None

        if markdown and len(markdown) > MIN_EXTRACTED_LENGTH:
            logger.info(f"Trafilatura extraction successful, length: {len(markdown)} characters")
            return markdown

        logger.warning("Trafilatura extraction returned empty or too short content")
        return None


def preprocess_html(html: str) -> str:
    """Strip scripts, navigation and other page chrome"""
    soup = BeautifulSoup(html, 'lxml')
    for tag in NOISE_TAGS:
        for element in soup.find_all(tag):
            element.decompose()
    return str(soup)


def clean_markdown(content: str) -> str:
    content = re.sub(r'\n{3,}', '\n\n', content)
    content = re.sub(r'\[Skip to content\]', '', content, flags=re.IGNORECASE)
    return content.strip()
