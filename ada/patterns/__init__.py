"""
Pattern registry - static, read-only classification tables
"""
from .categories import CATEGORIES, CATEGORY_LIST, CategoryDefinition, get_category_def
from .domains import DOMAIN_RULES, DomainRule, PatternMatch, extract_domain, is_likely_url, match_url_to_category
from .regexes import DATE_PATTERN, EMAIL_PATTERN, PHONE_PATTERN, PRICE_PATTERN

__all__ = [
    "CATEGORIES",
    "CATEGORY_LIST",
    "CategoryDefinition",
    "get_category_def",
    "DOMAIN_RULES",
    "DomainRule",
    "PatternMatch",
    "extract_domain",
    "is_likely_url",
    "match_url_to_category",
    "DATE_PATTERN",
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "PRICE_PATTERN",
]
