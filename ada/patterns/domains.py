"""
URL -> category quick mapping

Gives an instant category hint before the AI classifier runs. Rules are
evaluated top to bottom and the first match wins, so more specific patterns
must be declared before broader ones.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional, Pattern, Tuple
from urllib.parse import urlparse

from ada.models.item import Category


@dataclass(frozen=True)
class DomainRule:
    pattern: Pattern[str]
    category: Category
    confidence: float


@dataclass(frozen=True)
class PatternMatch:
    category: Category
    confidence: float


def _rule(pattern: str, category: Category, confidence: float) -> DomainRule:
    return DomainRule(re.compile(pattern, re.IGNORECASE), category, confidence)


DOMAIN_RULES: Tuple[DomainRule, ...] = (
    # Entertainment
    _rule(r"youtube\.com|youtu\.be", Category.ENTERTAINMENT, 0.85),
    _rule(r"netflix\.com", Category.ENTERTAINMENT, 0.9),
    _rule(r"spotify\.com|music\.apple", Category.ENTERTAINMENT, 0.85),
    _rule(r"imdb\.com|rottentomatoes", Category.ENTERTAINMENT, 0.85),
    _rule(r"twitch\.tv|soundcloud", Category.ENTERTAINMENT, 0.8),

    # Shopping
    _rule(r"amazon\.com|amazon\.\w{2}", Category.SHOPPING_DEALS, 0.85),
    _rule(r"ebay\.com|etsy\.com", Category.SHOPPING_DEALS, 0.85),
    _rule(r"shopify\.com|walmart\.com", Category.SHOPPING_DEALS, 0.8),
    _rule(r"target\.com|bestbuy\.com", Category.SHOPPING_DEALS, 0.8),

    # Travel
    _rule(r"airbnb\.com|booking\.com", Category.TRAVEL, 0.9),
    _rule(r"expedia\.com|kayak\.com", Category.TRAVEL, 0.85),
    _rule(r"tripadvisor\.com|hotels\.com", Category.TRAVEL, 0.85),
    _rule(r"united\.com|delta\.com|southwest\.com", Category.TRAVEL, 0.9),

    # Food
    _rule(r"yelp\.com", Category.FOOD_DINING, 0.8),
    _rule(r"doordash\.com|ubereats\.com|grubhub", Category.FOOD_DINING, 0.85),
    _rule(r"opentable\.com|resy\.com", Category.FOOD_DINING, 0.9),
    _rule(r"allrecipes\.com|epicurious", Category.FOOD_DINING, 0.85),

    # Jobs
    _rule(r"linkedin\.com/jobs|indeed\.com", Category.JOBS_CAREER, 0.9),
    _rule(r"glassdoor\.com|lever\.co", Category.JOBS_CAREER, 0.85),
    _rule(r"greenhouse\.io|angel\.co/jobs", Category.JOBS_CAREER, 0.85),

    # Learning
    _rule(r"arxiv\.org|scholar\.google", Category.LEARNING, 0.9),
    _rule(r"medium\.com|dev\.to", Category.LEARNING, 0.7),
    _rule(r"coursera\.org|udemy\.com", Category.LEARNING, 0.9),
    _rule(r"github\.com", Category.LEARNING, 0.65),
    _rule(r"stackoverflow\.com", Category.LEARNING, 0.75),
    _rule(r"wikipedia\.org", Category.LEARNING, 0.7),

    # Events
    _rule(r"eventbrite\.com|meetup\.com", Category.EVENTS_PLANS, 0.9),
    _rule(r"ticketmaster\.com|stubhub", Category.EVENTS_PLANS, 0.85),

    # Finance
    _rule(r"robinhood\.com|coinbase\.com", Category.FINANCE, 0.9),
    _rule(r"venmo\.com|paypal\.com", Category.FINANCE, 0.8),
    _rule(r"mint\.com|ynab\.com", Category.FINANCE, 0.85),

    # Health
    _rule(r"myfitnesspal|strava\.com", Category.HEALTH_FITNESS, 0.85),
    _rule(r"webmd\.com|healthline", Category.HEALTH_FITNESS, 0.8),

    # Social
    _rule(r"instagram\.com|twitter\.com|x\.com", Category.SOCIAL, 0.6),
    _rule(r"facebook\.com|tiktok\.com", Category.SOCIAL, 0.6),

    # Inspiration
    _rule(r"pinterest\.com|dribbble\.com", Category.INSPIRATION, 0.8),
    _rule(r"behance\.net|unsplash\.com", Category.INSPIRATION, 0.8),
)

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_BARE_DOMAIN_PATTERN = re.compile(r"^[a-z0-9-]+\.[a-z]{2,}", re.IGNORECASE)


def match_url_to_category(url: Any) -> Optional[PatternMatch]:
    """
    Match a URL to a category by domain

    Args:
        url: URL string

    Returns:
        The first matching rule's category and confidence, or None for unknown domains
    """
    if not url or not isinstance(url, str):
        return None

    for rule in DOMAIN_RULES:
        if rule.pattern.search(url):
            return PatternMatch(category=rule.category, confidence=rule.confidence)

    return None


def is_likely_url(text: Any) -> bool:
    """Detect if a string is likely a URL (with scheme or a bare domain)"""
    if not text or not isinstance(text, str):
        return False
    trimmed = text.strip()
    return bool(_SCHEME_PATTERN.match(trimmed) or _BARE_DOMAIN_PATTERN.match(trimmed))


def hostname_of(url: str) -> Optional[str]:
    """Hostname without a leading www., or None when the URL has no host"""
    try:
        hostname = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return re.sub(r"^www\.", "", hostname)


def extract_domain(url: str) -> str:
    """Extract a clean domain from a URL for display"""
    hostname = hostname_of(url) if isinstance(url, str) else None
    if hostname:
        return hostname
    return (url or "")[:30]
