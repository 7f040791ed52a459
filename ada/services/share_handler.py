"""
Share intake
Detects the content type, gives an instant heuristic hint, saves a pending
item and starts AI classification without waiting for it
"""
from typing import Optional, Tuple

from loguru import logger
from pydantic import BaseModel

from ada.backend.base import BackendClient
from ada.config import Settings
from ada.models import ClassificationResult, ContentType, Item, RawCapture
from ada.patterns import is_likely_url
from ada.services.classifier import classify_heuristic


class ShareInput(BaseModel):
    """What a share sheet hands over; any field may be missing"""
    text: Optional[str] = None
    url: Optional[str] = None
    image_uri: Optional[str] = None
    source_app: Optional[str] = None
    user_input: Optional[str] = None


class ShareResult(BaseModel):
    item: Item
    heuristic_hint: ClassificationResult


def detect_content_type(share: ShareInput, max_text_length: int = 10000) -> Tuple[ContentType, str]:
    """
    Determine content type and content from share input

    Precedence: explicit URL, then image, then text (URL-like text counts as a link)

    Returns:
        (content_type, content)
    """
    if share.url:
        return ContentType.LINK, share.url

    if share.image_uri:
        return ContentType.IMAGE, share.image_uri

    if share.text:
        stripped = share.text.strip()
        if is_likely_url(stripped):
            return ContentType.LINK, stripped
        return ContentType.TEXT, share.text[:max_text_length]

    return ContentType.TEXT, ""


async def process_shared_content(
    backend: BackendClient,
    user_id: str,
    share: ShareInput,
    settings: Optional[Settings] = None,
) -> ShareResult:
    """
    Process shared content end to end

    1. Detect content type
    2. Run heuristic classification (instant)
    3. Save a pending item
    4. Trigger classification without waiting

    Args:
        backend: System of record
        user_id: Owner of the new item
        share: Shared content
        settings: Application settings (if None, will load from environment)

    Returns:
        ShareResult with the saved item and the heuristic hint

    Raises:
        DatabaseError: If the item could not be saved
    """
    if settings is None:
        from ada.config import get_settings
        settings = get_settings()

    content_type, content = detect_content_type(share, settings.max_text_length)
    logger.info(f"Processing shared {content_type.value} from {share.source_app or 'unknown app'}")

    hint = classify_heuristic(content, content_type, currency=settings.default_currency)

    capture = RawCapture(
        type=content_type,
        content=content,
        source_app=share.source_app,
        user_input=share.user_input,
    )
    item = await backend.save_item(user_id, capture)
    logger.info(f"Saved item {item.id}, heuristic hint: {hint.category.value} ({hint.confidence:.2f})")

    try:
        await backend.trigger_classify(item.id)
    except Exception as e:
        logger.error(f"Classify trigger failed (non-fatal): {e}")

    return ShareResult(item=item, heuristic_hint=hint)
