"""Keyed query cache for async fetches.

Each request key maps to a ``QueryEntry`` holding status, data and error.
At most one asyncio task runs per key; asking for a key that is loading or
already loaded reuses the existing entry instead of issuing a new request.

Keys must be deterministic encodings of every request parameter (see
``make_query_key``) so a response can only ever land on the entry for the
exact parameters it was requested with.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
import asyncio
import logging
import time

from nbainsights.ops.diagnostics import DISABLED, Diagnostics

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


class QueryStatus(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class QueryEntry:
    key: str
    status: QueryStatus = QueryStatus.LOADING
    data: Any = None
    error: Optional[BaseException] = None
    updated_at: float = field(default_factory=time.monotonic)
    task: Optional["asyncio.Task[None]"] = field(default=None, repr=False, compare=False)

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is QueryStatus.ERROR


Listener = Callable[[QueryEntry], None]


def _encode_part(part: Any) -> str:
    if part is None:
        return ""
    if isinstance(part, (list, tuple, set, frozenset)):
        return ",".join(str(p) for p in sorted(part))
    if isinstance(part, Enum):
        return str(part.value)
    return str(part)


def make_query_key(name: str, *parts: Any) -> str:
    """Encode a query name and its parameters; collections are sorted and comma-joined."""
    return "|".join([name] + [_encode_part(p) for p in parts])


class QueryCache:
    def __init__(self, diagnostics: Optional[Diagnostics] = None) -> None:
        self._entries: Dict[str, QueryEntry] = {}
        self._listeners: List[Listener] = []
        self._diagnostics = diagnostics or DISABLED

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[QueryEntry]:
        return self._entries.get(key)

    def data(self, key: str) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def keys(self) -> Iterable[str]:
        return list(self._entries)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for entry transitions; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def fetch(self, key: str, fetcher: Fetcher) -> QueryEntry:
        """Start ``fetcher`` for ``key`` unless that key is already loading or loaded."""
        entry = self._entries.get(key)
        if entry is not None and not entry.is_error:
            return entry
        return self._start(key, fetcher, previous=entry)

    def refetch(self, key: str, fetcher: Fetcher) -> QueryEntry:
        """Force a new request for ``key``, keeping the previous data until it resolves."""
        entry = self._entries.get(key)
        if entry is not None and entry.task is not None and not entry.task.done():
            entry.task.cancel()
        return self._start(key, fetcher, previous=entry)

    def cancel(self, key: str) -> bool:
        """Cancel the in-flight request for ``key``; returns False if nothing was running."""
        entry = self._entries.get(key)
        if entry is None or entry.task is None or entry.task.done():
            return False
        entry.task.cancel()
        entry.task = None
        if entry.data is None:
            del self._entries[key]
        else:
            entry.status = QueryStatus.SUCCESS
            entry.updated_at = time.monotonic()
        self._diagnostics.query_transition(key, "cancelled")
        return True

    def invalidate(self, key: str) -> None:
        self.cancel(key)
        self._entries.pop(key, None)

    def clear(self) -> None:
        for key in list(self._entries):
            self.invalidate(key)

    async def wait(self, key: str) -> Optional[QueryEntry]:
        entry = self._entries.get(key)
        if entry is not None and entry.task is not None:
            await asyncio.gather(entry.task, return_exceptions=True)
        return self._entries.get(key)

    async def settle(self) -> None:
        """Wait until no request is in flight, including ones started by listeners."""
        while True:
            pending = [
                e.task for e in self._entries.values()
                if e.task is not None and not e.task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _start(self, key: str, fetcher: Fetcher, previous: Optional[QueryEntry] = None) -> QueryEntry:
        entry = QueryEntry(key=key, data=previous.data if previous is not None else None)
        self._entries[key] = entry
        entry.task = asyncio.get_running_loop().create_task(self._run(entry, fetcher))
        self._diagnostics.query_transition(key, entry.status.value)
        self._notify(entry)
        return entry

    async def _run(self, entry: QueryEntry, fetcher: Fetcher) -> None:
        try:
            data = await fetcher()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._entries.get(entry.key) is not entry:
                return
            entry.status = QueryStatus.ERROR
            entry.error = exc
            logger.warning("Query %s failed: %s", entry.key, exc)
        else:
            if self._entries.get(entry.key) is not entry:
                return
            entry.status = QueryStatus.SUCCESS
            entry.data = data
            entry.error = None
        entry.task = None
        entry.updated_at = time.monotonic()
        self._diagnostics.query_transition(entry.key, entry.status.value)
        self._notify(entry)

    def _notify(self, entry: QueryEntry) -> None:
        for listener in list(self._listeners):
            listener(entry)
