"""
Services module
"""
from .extractor import extract_data, estimate_urgency
from .classifier import classify_heuristic
from .suggestions import suggest_actions

__all__ = [
    "extract_data",
    "estimate_urgency",
    "classify_heuristic",
    "suggest_actions",
]
