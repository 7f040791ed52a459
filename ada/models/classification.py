"""
Classification result shape
Produced by both the heuristic classifier and the AI classifier, so either can populate an item
"""
import math
from typing import Any, List

from pydantic import BaseModel, Field, field_validator

from .item import Category, ExtractedData, SuggestedAction

TITLE_MAX_LENGTH = 60
FALLBACK_CONFIDENCE = 0.3


class ClassificationResult(BaseModel):
    """
    Structured classification of one piece of shared content
    This model is also the Instructor response model for the AI classifier
    """
    category: Category = Field(description="One of the 12 category ids")
    confidence: float = Field(ge=0.0, le=1.0, description="How certain the category is, 0-1")
    title: str = Field(description="Concise title, max 60 characters")
    description: str = Field(default="", description="1-2 sentence summary")
    extracted_data: ExtractedData = Field(default_factory=ExtractedData)
    suggested_actions: List[SuggestedAction] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Any:
        # Unknown categories from a model fall back to the catch-all
        if isinstance(value, Category):
            return value
        if isinstance(value, str) and value in Category._value2member_map_:
            return value
        return Category.OTHER

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return FALLBACK_CONFIDENCE
        if math.isnan(number):
            return FALLBACK_CONFIDENCE
        return min(1.0, max(0.0, number))

    @field_validator("title", mode="before")
    @classmethod
    def _truncate_title(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value[:TITLE_MAX_LENGTH]
        return value

    def to_payload(self) -> dict:
        """Serialize to the wire shape shared with renderers and batch jobs"""
        payload = self.model_dump(mode="json")
        payload["extracted_data"] = self.extracted_data.to_bag()
        return payload
