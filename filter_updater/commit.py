"""Promotion of staged filter files while the consumer is paused."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import structlog

from .engine.storage import FilterStorage
from .errors import FilterIOError
from .registry import FilterRegistry


class ProxyController(Protocol):
    """The consuming service that reads canonical filter files."""

    def close(self) -> None:
        """Stop reading and release file handles."""

    def restart(self) -> None:
        """Reload from the canonical files."""


class NullProxyController:
    """Controller for running without an attached consumer."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("filter_updater.proxy")

    def close(self) -> None:
        self.logger.debug("proxy_close_skipped")

    def restart(self) -> None:
        self.logger.debug("proxy_restart_skipped")


@dataclass
class CommitReport:
    promoted: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    paused: bool = False

    @property
    def attempted(self) -> int:
        return len(self.promoted) + len(self.failed)


class CommitManager:
    """Rename every staged file over its canonical path in one consumer pause."""

    def __init__(
        self,
        registry: FilterRegistry,
        storage: FilterStorage,
        controller: ProxyController,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.registry = registry
        self.storage = storage
        self.controller = controller
        self.logger = logger or structlog.get_logger("filter_updater.commit")

    def commit(self) -> CommitReport:
        """Promote staged files; a no-op (no pause) when nothing is staged.

        Failed renames keep their ``pending_id`` and are attempted again on
        the next call. ``restart`` runs once per batch whatever the outcome.
        """

        report = CommitReport()
        pending = self.registry.pending()
        if not pending:
            self.logger.debug("commit_skipped_nothing_pending")
            return report

        report.paused = True
        self._call_controller("close")
        try:
            for entry in pending:
                try:
                    self.storage.promote(entry.pending_id, entry.id)
                except FilterIOError as exc:
                    self.logger.error(
                        "commit_rename_failed",
                        filter_id=entry.id,
                        pending_id=entry.pending_id,
                        url=entry.url,
                        error=str(exc),
                    )
                    report.failed.append(entry.id)
                    continue
                self.registry.clear_pending(entry.id, entry.pending_id)
                report.promoted.append(entry.id)
        finally:
            self._call_controller("restart")
        self.logger.info(
            "filters_committed",
            updated=len(report.promoted),
            failed=len(report.failed),
        )
        return report

    def _call_controller(self, action: str) -> None:
        try:
            getattr(self.controller, action)()
        except Exception as exc:  # noqa: BLE001
            self.logger.error(f"proxy_{action}_failed", error=str(exc))


__all__ = ["CommitManager", "CommitReport", "NullProxyController", "ProxyController"]
