"""
Heuristic classifier - fast, deterministic, works offline

Used for the instant hint at share time and as the fallback when the AI
classifier is unavailable. Two independent scoring strategies with a simple
precedence rule:

1. URL domain rules (fixed per-rule confidence, 0.6-0.9)
2. Keyword scoring (confidence = min(0.7, 0.4 + score * 0.5))

A domain hit short-circuits keyword scoring. Nothing matching falls back to
"other" with confidence 0.3.
"""
from datetime import datetime
from typing import Any, Optional, Tuple, Union

from loguru import logger

from ada.models import Category, ClassificationResult, ContentType, ExtractedData
from ada.models.classification import TITLE_MAX_LENGTH
from ada.patterns import CATEGORY_LIST, is_likely_url, match_url_to_category
from ada.patterns.domains import hostname_of
from ada.services.extractor import extract_data
from ada.services.suggestions import suggest_actions

FALLBACK_CONFIDENCE = 0.3
MIN_KEYWORD_HITS = 2
KEYWORD_BASE_CONFIDENCE = 0.4
KEYWORD_CONFIDENCE_SCALE = 0.5
KEYWORD_CONFIDENCE_CAP = 0.7


def match_by_keywords(text: str) -> Optional[Tuple[Category, float]]:
    """
    Score every category with keywords against the text

    Args:
        text: Raw content

    Returns:
        (category, confidence) for the best qualifying category, or None
    """
    lower = text.lower()
    best_category: Optional[Category] = None
    best_score = 0.0

    for definition in CATEGORY_LIST:
        if not definition.keywords:
            continue

        hits = sum(1 for keyword in definition.keywords if keyword in lower)
        score = hits / len(definition.keywords)
        # Strictly greater: ties keep the first-declared category
        if hits >= MIN_KEYWORD_HITS and score > best_score:
            best_score = score
            best_category = definition.id

    if best_category is None:
        return None

    confidence = min(KEYWORD_CONFIDENCE_CAP, KEYWORD_BASE_CONFIDENCE + best_score * KEYWORD_CONFIDENCE_SCALE)
    return best_category, confidence


def generate_title(content: str) -> str:
    """Hostname for URL-like content, otherwise the first line"""
    if is_likely_url(content):
        hostname = hostname_of(content)
        if hostname:
            return hostname[:TITLE_MAX_LENGTH]
        return content[:TITLE_MAX_LENGTH]
    first_line = content.split("\n")[0]
    return first_line[:TITLE_MAX_LENGTH]


def _build_result(
    category: Category,
    confidence: float,
    content: str,
    extracted: ExtractedData,
) -> ClassificationResult:
    title = generate_title(content)
    return ClassificationResult(
        category=category,
        confidence=confidence,
        title=title,
        description="",
        extracted_data=extracted,
        suggested_actions=suggest_actions(category, extracted, title=title or None),
        tags=[],
    )


def classify_heuristic(
    content: Any,
    content_type: Union[ContentType, str] = ContentType.TEXT,
    now: Optional[datetime] = None,
    currency: str = "USD",
) -> ClassificationResult:
    """
    Run heuristic classification on raw content

    Args:
        content: Raw content (URL, text, or a storage reference)
        content_type: How the content was shared
        now: Reference time for urgency estimation
        currency: Currency attached to extracted prices

    Returns:
        ClassificationResult; this function never raises
    """
    if not isinstance(content, str):
        content = ""

    try:
        category, confidence = Category.OTHER, FALLBACK_CONFIDENCE
        matched = False

        if content_type == ContentType.LINK or is_likely_url(content):
            url_match = match_url_to_category(content)
            if url_match:
                category, confidence = url_match.category, url_match.confidence
                matched = True

        if not matched:
            keyword_match = match_by_keywords(content)
            if keyword_match:
                category, confidence = keyword_match

        extracted = extract_data(content, now=now, currency=currency)
        return _build_result(category, confidence, content, extracted)
    except Exception as e:
        logger.warning(f"Heuristic classification degraded to fallback: {e}")
        return ClassificationResult(
            category=Category.OTHER,
            confidence=FALLBACK_CONFIDENCE,
            title=content[:TITLE_MAX_LENGTH],
            description="",
        )
