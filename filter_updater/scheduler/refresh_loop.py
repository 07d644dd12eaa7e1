"""Refresh cycle: select due filters one at a time, stage them, then commit."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Callable

import structlog

from ..commit import CommitManager, CommitReport
from ..engine import Fetcher, FilterStorage, summarize
from ..errors import FilterIOError, FilterUpdaterError
from ..registry import FilterEntry, FilterRegistry


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CycleState(str, Enum):
    IDLE = "idle"
    SELECT = "select"
    REFRESH = "refresh"
    COMMIT = "commit"


@dataclass
class CycleReport:
    refreshed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    commit: CommitReport | None = None
    skipped: bool = False


class RefreshLoop:
    """Drive fetch → summarize → stage for each due entry, then one commit.

    Downloads are strictly serialized; a failing entry is logged and the
    cycle moves on to the next one. Only one cycle runs at a time, whether
    it was started by the background job or by ``refresh_now``.
    """

    def __init__(
        self,
        registry: FilterRegistry,
        fetcher: Fetcher,
        storage: FilterStorage,
        commit_manager: CommitManager,
        enabled: bool = True,
        clock: Callable[[], datetime] = utcnow,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.storage = storage
        self.commit_manager = commit_manager
        self.enabled = enabled
        self.clock = clock
        self.logger = logger or structlog.get_logger("filter_updater.scheduler")
        self.state = CycleState.IDLE
        self.dirty = False
        self._cycle_lock = Lock()

    def run_cycle(self) -> CycleReport:
        with self._cycle_lock:
            return self._run_cycle()

    def _run_cycle(self) -> CycleReport:
        report = CycleReport()
        if not self.enabled:
            report.skipped = True
            self._enter(CycleState.IDLE)
            return report

        while True:
            self._enter(CycleState.SELECT)
            entry = self.registry.select_due(self.clock())
            if entry is None:
                break
            self._enter(CycleState.REFRESH)
            if self.refresh(entry):
                report.refreshed.append(entry.id)
            else:
                report.failed.append(entry.id)

        # Staged files left over from a failed rename also reopen the window
        if self.dirty or self.registry.has_pending():
            self._enter(CycleState.COMMIT)
            report.commit = self.commit_manager.commit()
            self.dirty = False
        else:
            self.logger.debug("no_filters_updated")
        self._enter(CycleState.IDLE)
        return report

    def refresh(self, entry: FilterEntry) -> bool:
        """Download ``entry`` into a fresh staged file; ``True`` when staged."""

        try:
            body = self.fetcher.download(entry.url)
            rule_count = summarize(body)
            staged_id = self.registry.minter.mint()
            path = self.storage.write(staged_id, body)
        except FilterUpdaterError as exc:
            self.logger.error("filter_refresh_failed", filter_id=entry.id, url=entry.url, error=str(exc))
            return False

        superseded = self.registry.stage(entry.id, staged_id, rule_count, self.clock())
        if superseded is None:
            self.logger.warning("filter_removed_during_refresh", filter_id=entry.id, url=entry.url)
            self._discard(staged_id)
            return False
        if superseded and superseded not in (staged_id, entry.id):
            # An older staged file from a failed rename is no longer referenced
            self._discard(superseded)
        self.dirty = True
        self.logger.info(
            "filter_refreshed",
            filter_id=entry.id,
            url=entry.url,
            staged_path=str(path),
            rule_count=rule_count,
        )
        return True

    def _discard(self, staged_id: int) -> None:
        try:
            self.storage.discard(staged_id)
        except FilterIOError as exc:
            self.logger.warning("staged_file_discard_failed", pending_id=staged_id, error=str(exc))

    def _enter(self, state: CycleState) -> None:
        if state is not self.state:
            self.logger.debug("cycle_state", previous=self.state.value, state=state.value)
        self.state = state


__all__ = ["CycleReport", "CycleState", "RefreshLoop", "utcnow"]
