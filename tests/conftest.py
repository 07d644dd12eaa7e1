"""Shared fixtures: fake clock, stubbed HTTP transport and consumer."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Callable

import httpx
import pytest

from filter_updater.commit import CommitManager
from filter_updater.config import FilterSource, UpdaterConfig
from filter_updater.engine import Fetcher, FilterStorage
from filter_updater.registry import FilterEntry, FilterRegistry
from filter_updater.scheduler import RefreshLoop
from filter_updater.updater import FilterUpdater

PERIOD = timedelta(hours=24)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingController:
    """Consumer stub recording close/restart calls."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.fail_on = fail_on or set()

    def close(self) -> None:
        self.calls.append("close")
        if "close" in self.fail_on:
            raise RuntimeError("close failed")

    def restart(self) -> None:
        self.calls.append("restart")
        if "restart" in self.fail_on:
            raise RuntimeError("restart failed")


@dataclass
class FakeUpstream:
    """Route table for ``httpx.MockTransport``.

    A route value is ``(status, body)`` or an exception instance to raise.
    ``delay`` holds each response open so overlapping requests show up in
    ``max_in_flight``.
    """

    routes: dict[str, Any] = field(default_factory=dict)
    requested: list[str] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0
    on_request: Callable[[str], None] | None = None
    delay: float = 0.0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        with self._lock:
            self.requested.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.on_request is not None:
                self.on_request(url)
            route = self.routes.get(url, (404, b"not found"))
            if isinstance(route, Exception):
                raise route
            status, body = route
            return httpx.Response(status, content=body, request=request)
        finally:
            with self._lock:
                self.in_flight -= 1

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def controller() -> RecordingController:
    return RecordingController()


@pytest.fixture
def storage(tmp_path: Path) -> FilterStorage:
    return FilterStorage(tmp_path / "filters")


@pytest.fixture
def registry() -> FilterRegistry:
    return FilterRegistry(PERIOD)


@pytest.fixture
def refresh_loop(registry, storage, upstream, controller, clock) -> RefreshLoop:
    fetcher = Fetcher(upstream.client())
    commit_manager = CommitManager(registry, storage, controller)
    return RefreshLoop(registry, fetcher, storage, commit_manager, clock=clock)


@pytest.fixture
def make_entry() -> Callable[..., FilterEntry]:
    def _builder(**overrides: Any) -> FilterEntry:
        base: dict[str, Any] = {
            "id": 100,
            "name": "Example",
            "url": "https://lists.example.com/example.txt",
        }
        base.update(overrides)
        return FilterEntry(**base)

    return _builder


@pytest.fixture
def make_updater(tmp_path: Path, upstream, controller, clock) -> Callable[..., FilterUpdater]:
    def _builder(**overrides: Any) -> FilterUpdater:
        filters = overrides.pop("filters", [])
        config = UpdaterConfig(
            filter_dir=tmp_path / "filters",
            filters=[FilterSource(**item) for item in filters],
            **overrides,
        )
        return FilterUpdater(
            config,
            config.filter_dir,
            controller=controller,
            client=upstream.client(),
            clock=clock,
        )

    return _builder
