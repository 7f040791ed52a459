"""
Local state - optimistic collections owned by a session
"""
from .base import OptimisticCollection, Snapshot
from .items import ItemsStore
from .actions import ActionsStore
from .session import Session

__all__ = [
    "OptimisticCollection",
    "Snapshot",
    "ItemsStore",
    "ActionsStore",
    "Session",
]
