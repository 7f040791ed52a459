"""
Display formatting helpers for the CLI
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from urllib.parse import urlparse

from dateutil import parser as dateutil_parser

ELLIPSIS = "…"
CLEAN_URL_LENGTH = 50


def time_ago(value: Union[str, datetime], now: Optional[datetime] = None) -> str:
    """Relative time string: "just now", "2m ago", "3h ago", "5d ago", else "Jan 5" """
    then = dateutil_parser.isoparse(value) if isinstance(value, str) else value
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    diff = now - then
    if diff < timedelta(minutes=1):
        return "just now"
    if diff < timedelta(hours=1):
        return f"{int(diff.total_seconds() // 60)}m ago"
    if diff < timedelta(days=1):
        return f"{int(diff.total_seconds() // 3600)}h ago"
    if diff < timedelta(weeks=1):
        return f"{diff.days}d ago"
    return f"{then.strftime('%b')} {then.day}"


def truncate(text: Optional[str], max_length: int) -> str:
    if not text or len(text) <= max_length:
        return text or ""
    return text[:max_length - 1] + ELLIPSIS


def clean_url(url: str) -> str:
    """Drop scheme, www., query and a bare trailing slash"""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.hostname:
        return truncate(url, CLEAN_URL_LENGTH)
    host = parsed.hostname
    if host.startswith("www."):
        host = host[4:]
    path = "" if parsed.path in ("", "/") else parsed.path
    return truncate(f"{host}{path}", CLEAN_URL_LENGTH)


def confidence_label(score: Optional[float]) -> str:
    if score is None:
        return ""
    if score >= 0.85:
        return "High"
    if score >= 0.6:
        return "Medium"
    return "Low"


def capitalize(text: Optional[str]) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:]
