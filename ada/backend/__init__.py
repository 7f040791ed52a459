"""
System of record - backend interface and the local JSON implementation
"""
from .base import BackendClient, DatabaseError, FunctionError, DEFAULT_PAGE_LIMIT
from .realtime import RealtimeHub
from .json_backend import JsonBackend

__all__ = [
    "BackendClient",
    "DatabaseError",
    "FunctionError",
    "DEFAULT_PAGE_LIMIT",
    "RealtimeHub",
    "JsonBackend",
]
