"""In-memory table of filter entries guarded by a single lock."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(slots=True)
class FilterEntry:
    """A registered filter list and its refresh metadata."""

    id: int
    name: str
    url: str
    enabled: bool = True
    rule_count: int = 0
    last_updated: datetime | None = None
    # EPOCH means due immediately
    next_update: datetime = EPOCH
    # 0 when nothing is staged
    pending_id: int = 0


class IdMinter:
    """Hand out ids derived from wall-clock seconds, never repeating one."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = Lock()

    def observe(self, value: int) -> None:
        with self._lock:
            self._last = max(self._last, value)

    def mint(self) -> int:
        with self._lock:
            candidate = int(self._clock())
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


class FilterRegistry:
    """Owned container of entries; every scan-then-mutate step runs under ``_lock``.

    The lock is never held across network or file I/O.
    """

    def __init__(self, update_interval: timedelta, minter: IdMinter | None = None) -> None:
        self.update_interval = update_interval
        self.minter = minter or IdMinter()
        self._entries: list[FilterEntry] = []
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def entries(self) -> list[FilterEntry]:
        with self._lock:
            return [replace(entry) for entry in self._entries]

    def get(self, url: str) -> FilterEntry | None:
        with self._lock:
            entry = self._find(url)
            return replace(entry) if entry else None

    def check_unique(self, name: str, url: str) -> bool:
        with self._lock:
            return self._is_unique(name, url)

    def insert(self, entry: FilterEntry) -> bool:
        """Append ``entry`` unless its name or URL is taken; returns success."""

        with self._lock:
            if not self._is_unique(entry.name, entry.url):
                return False
            if any(existing.id == entry.id for existing in self._entries):
                return False
            self._entries.append(replace(entry))
        self.minter.observe(max(entry.id, entry.pending_id))
        return True

    def delete(self, url: str) -> FilterEntry | None:
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.url == url:
                    return self._entries.pop(index)
        return None

    def select_due(self, now: datetime) -> FilterEntry | None:
        """Reserve and return the first enabled entry whose deadline has passed.

        The deadline moves a full interval ahead before any download starts.
        """

        with self._lock:
            for entry in self._entries:
                if entry.enabled and entry.next_update <= now:
                    entry.next_update = now + self.update_interval
                    return replace(entry)
        return None

    def stage(self, entry_id: int, pending_id: int, rule_count: int, last_updated: datetime) -> int | None:
        """Record a staged download; return the staged id it replaces.

        ``None`` means the entry is gone, ``0`` that nothing was staged before.
        """

        with self._lock:
            entry = self._find_id(entry_id)
            if entry is None:
                return None
            previous = entry.pending_id
            entry.pending_id = pending_id
            entry.rule_count = rule_count
            entry.last_updated = last_updated
            if entry.next_update < last_updated:
                entry.next_update = last_updated
            return previous

    def pending(self) -> list[FilterEntry]:
        with self._lock:
            return [
                replace(entry)
                for entry in self._entries
                if entry.pending_id and entry.pending_id != entry.id
            ]

    def has_pending(self) -> bool:
        with self._lock:
            return any(entry.pending_id and entry.pending_id != entry.id for entry in self._entries)

    def clear_pending(self, entry_id: int, pending_id: int) -> None:
        with self._lock:
            entry = self._find_id(entry_id)
            if entry is not None and entry.pending_id == pending_id:
                entry.pending_id = 0

    # ------------------------------------------------------------------
    def _is_unique(self, name: str, url: str) -> bool:
        return not any(entry.name == name or entry.url == url for entry in self._entries)

    def _find(self, url: str) -> FilterEntry | None:
        return next((entry for entry in self._entries if entry.url == url), None)

    def _find_id(self, entry_id: int) -> FilterEntry | None:
        return next((entry for entry in self._entries if entry.id == entry_id), None)


__all__ = ["EPOCH", "FilterEntry", "FilterRegistry", "IdMinter"]
