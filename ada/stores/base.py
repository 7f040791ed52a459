"""
Optimistic collection - the mutation discipline shared by every store

Each mutation:
1. captures a Snapshot (deep copy of the records plus the realtime journal position)
2. applies the new state locally and notifies listeners
3. awaits the remote call
4. on success keeps the optimistic state, optionally refined with returned fields
5. on failure restores the snapshot, re-applies realtime pushes received
   since the snapshot, and records a short error message
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")

Listener = Callable[[List[T]], None]


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    records: List[T]
    journal_position: int


class OptimisticCollection(Generic[T]):
    """Ordered, id-keyed records with snapshot rollback and realtime merge"""

    def __init__(self, name: str):
        self.name = name
        self.records: List[T] = []
        self.loading = False
        self.error: Optional[str] = None
        self.has_more = True
        self._listeners: List[Listener] = []
        self._journal: List[T] = []
        self._in_flight = 0

    # Reads

    def get(self, record_id: str) -> Optional[T]:
        return next((record for record in self.records if record.id == record_id), None)

    def __len__(self) -> int:
        return len(self.records)

    # Listeners

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.records)

    # Local writes

    def replace_all(self, records: List[T]) -> None:
        self.records = list(records)
        self._notify()

    def extend(self, records: List[T]) -> None:
        self.records = self.records + list(records)
        self._notify()

    def upsert(self, record: T) -> None:
        """Replace in place by id, else prepend"""
        self.records = _merged(self.records, record)
        self._notify()

    def update_where(self, record_id: str, **changes) -> None:
        self.records = [
            record.model_copy(update=changes) if record.id == record_id else record
            for record in self.records
        ]
        self._notify()

    def remove(self, record_id: str) -> None:
        self.records = [record for record in self.records if record.id != record_id]
        self._notify()

    # Realtime

    def apply_push(self, record: T) -> None:
        """Merge a pushed record; journaled while a mutation is in flight"""
        if self._in_flight:
            self._journal.append(record.model_copy(deep=True))
        self.upsert(record)

    # Snapshots

    def snapshot(self) -> Snapshot:
        return Snapshot(
            records=[record.model_copy(deep=True) for record in self.records],
            journal_position=len(self._journal),
        )

    def restore(self, snapshot: Snapshot) -> None:
        records = list(snapshot.records)
        for pushed in self._journal[snapshot.journal_position:]:
            records = _merged(records, pushed)
        self.records = records
        self._notify()

    async def mutate(
        self,
        operation: str,
        apply: Callable[[], None],
        remote: Callable[[], Awaitable[R]],
        reraise: bool = False,
        on_success: Optional[Callable[[R], None]] = None,
    ) -> Optional[R]:
        """
        Run one optimistic mutation

        Args:
            operation: Short name used in logs and the error message
            apply: Applies the optimistic change to this collection
            remote: Performs the remote call
            reraise: Caller-visible mutation; the failure is re-raised after rollback
            on_success: Refines local state with the remote result

        Returns:
            The remote result, or None when a fire-and-forget mutation failed
        """
        snapshot = self.snapshot()
        self.error = None
        self._in_flight += 1
        try:
            apply()
            result = await remote()
        except Exception as e:
            self.restore(snapshot)
            self.error = f"{operation} failed: {getattr(e, 'message', None) or e}"
            if reraise:
                logger.warning(f"{self.name}: {operation} failed, rolled back: {e}")
                raise
            logger.error(f"{self.name}: {operation} failed, rolling back: {e}")
            return None
        finally:
            self._in_flight -= 1
            if not self._in_flight:
                self._journal.clear()

        if on_success is not None:
            on_success(result)
        return result


def _merged(records: List[T], record: T) -> List[T]:
    if any(existing.id == record.id for existing in records):
        return [record if existing.id == record.id else existing for existing in records]
    return [record] + list(records)
