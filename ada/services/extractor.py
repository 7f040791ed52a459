"""
Structured data extraction from raw text
Pure functions: dates, prices, contacts and an urgency estimate
"""
from datetime import datetime
from typing import List, Optional

from dateutil import parser as dateutil_parser
from loguru import logger

from ada.models import Contact, ExtractedData, Price, Urgency
from ada.patterns import DATE_PATTERN, EMAIL_PATTERN, PHONE_PATTERN, PRICE_PATTERN

MAX_DATES = 5


def parse_date(date_str: str) -> Optional[datetime]:
    """Parse a loosely formatted date (month first), or None when it cannot be read"""
    try:
        return dateutil_parser.parse(date_str)
    except (ValueError, OverflowError, TypeError):
        return None


def hours_until(target: datetime, now: Optional[datetime] = None) -> float:
    """Hours from now until target; naive values are read as local time"""
    if now is None:
        now = datetime.now(target.tzinfo) if target.tzinfo else datetime.now()
    if target.tzinfo is None and now.tzinfo is not None:
        target = target.replace(tzinfo=now.tzinfo)
    elif target.tzinfo is not None and now.tzinfo is None:
        now = now.astimezone()
    return (target - now).total_seconds() / 3600


def estimate_urgency(date_str: str, now: Optional[datetime] = None) -> Urgency:
    """
    Estimate urgency from how soon a date is

    Args:
        date_str: Date as found in the text
        now: Reference time (defaults to the current time)

    Returns:
        critical under 24h, high under 72h, medium under a week, otherwise low.
        Past and unparseable dates are low.
    """
    parsed = parse_date(date_str)
    if parsed is None:
        logger.debug(f"Could not parse date for urgency estimation: {date_str!r}")
        return Urgency.LOW

    hours = hours_until(parsed, now)
    if hours < 0:
        return Urgency.LOW
    if hours < 24:
        return Urgency.CRITICAL
    if hours < 72:
        return Urgency.HIGH
    if hours < 168:
        return Urgency.MEDIUM
    return Urgency.LOW


def _unique(values: List[str]) -> List[str]:
    seen = set()
    unique = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


def extract_data(text: str, now: Optional[datetime] = None, currency: str = "USD") -> ExtractedData:
    """
    Run the regex extractors over raw text

    Args:
        text: Raw content
        now: Reference time for urgency estimation
        currency: Currency code attached to every price

    Returns:
        ExtractedData with only the fields that were found
    """
    if not isinstance(text, str) or not text:
        return ExtractedData()

    data = ExtractedData()

    dates = [match.group(0) for match in DATE_PATTERN.finditer(text)]
    if dates:
        data.dates = _unique(dates)[:MAX_DATES]
        data.urgency = estimate_urgency(dates[0], now)

    prices = PRICE_PATTERN.findall(text)
    if prices:
        data.prices = [Price(amount=float(amount.replace(",", "")), currency=currency) for amount in prices]

    contacts = [Contact(email=email) for email in EMAIL_PATTERN.findall(text)]
    contacts.extend(Contact(phone=phone.strip()) for phone in PHONE_PATTERN.findall(text))
    if contacts:
        data.contacts = contacts

    return data
