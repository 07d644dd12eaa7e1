"""Facade wiring registry, fetcher, storage, commit and scheduling together."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

import httpx
import structlog

from .commit import CommitManager, NullProxyController, ProxyController
from .config import FilterSource, UpdaterConfig
from .engine import Fetcher, FilterStorage, summarize
from .errors import DuplicateError, FilterIOError
from .registry import FilterEntry, FilterRegistry
from .scheduler import CycleReport, FilterScheduler, RefreshLoop
from .scheduler.refresh_loop import utcnow


class FilterUpdater:
    """Keep configured filter lists current on disk for a running consumer."""

    def __init__(
        self,
        config: UpdaterConfig,
        filter_dir: Path,
        controller: ProxyController | None = None,
        client: httpx.Client | None = None,
        clock: Callable[[], datetime] = utcnow,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.clock = clock
        self.logger = (logger or structlog.get_logger("filter_updater")).bind(component="updater")
        self.registry = FilterRegistry(config.update_interval)
        self.storage = FilterStorage(filter_dir, config.file_extension)
        self.fetcher = Fetcher(client, timeout=config.http_timeout)
        self.commit_manager = CommitManager(
            self.registry, self.storage, controller or NullProxyController()
        )
        self.loop = RefreshLoop(
            self.registry,
            self.fetcher,
            self.storage,
            self.commit_manager,
            enabled=config.enabled,
            clock=clock,
        )
        self.scheduler = FilterScheduler(self.loop, config.update_interval)

    # ------------------------------------------------------------------
    def load_filters(self, sources: list[FilterSource] | None = None) -> int:
        """Seed the registry from configured filters and their files on disk.

        Entries whose canonical file is missing are kept and left due at once.
        """

        sources = self.config.filters if sources is None else sources
        for source in sources:
            self.registry.minter.observe(source.id)
        loaded = 0
        for source in sources:
            entry = FilterEntry(
                id=source.id or self.registry.minter.mint(),
                name=source.name,
                url=source.url,
                enabled=source.enabled,
            )
            try:
                entry.last_updated = self.storage.modified_at(entry.id)
                entry.next_update = entry.last_updated + self.registry.update_interval
                entry.rule_count = summarize(self.storage.read(entry.id))
            except FilterIOError as exc:
                self.logger.error("filter_file_unavailable", filter_id=entry.id, error=str(exc))
            if not self.registry.insert(entry):
                self.logger.error("filter_duplicate_skipped", name=entry.name, url=entry.url)
                continue
            loaded += 1
        self.logger.info("filters_loaded", count=loaded)
        return loaded

    def add_filter(self, name: str, url: str) -> FilterEntry:
        """Download a new filter to its canonical path and register it.

        Raises ``DuplicateError``, ``NetworkError``, ``ProtocolError`` or
        ``FilterIOError``; the registry is untouched on any failure.
        """

        if not self.registry.check_unique(name, url):
            raise DuplicateError(name, url)
        filter_id = self.registry.minter.mint()
        try:
            body = self.fetcher.download(url)
            entry = FilterEntry(id=filter_id, name=name, url=url, rule_count=summarize(body))
            self.storage.write(filter_id, body)
        except Exception as exc:
            self.logger.debug("filter_add_failed", url=url, error=str(exc))
            raise
        now = self.clock()
        entry.last_updated = now
        entry.next_update = now + self.registry.update_interval
        if not self.registry.insert(entry):
            self.storage.discard(filter_id)
            raise DuplicateError(name, url)
        self.logger.info("filter_added", filter_id=filter_id, url=url, rule_count=entry.rule_count)
        return entry

    def delete_filter(self, url: str) -> FilterEntry | None:
        removed = self.registry.delete(url)
        if removed is None:
            self.logger.debug("filter_not_found", url=url)
        else:
            self.logger.info("filter_removed", filter_id=removed.id, url=url)
        return removed

    def filters(self) -> list[FilterEntry]:
        return self.registry.entries()

    def sources(self) -> list[FilterSource]:
        """Configuration view of the current registry."""

        return [
            FilterSource(id=entry.id, enabled=entry.enabled, name=entry.name, url=entry.url)
            for entry in self.registry.entries()
        ]

    def path_for(self, entry: FilterEntry) -> Path:
        return self.storage.path_for(entry.id)

    # ------------------------------------------------------------------
    def refresh_now(self) -> CycleReport:
        return self.loop.run_cycle()

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self.fetcher.close()


__all__ = ["FilterUpdater"]
