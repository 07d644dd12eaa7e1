"""Error taxonomy shared by the updater components."""

from __future__ import annotations


class FilterUpdaterError(Exception):
    """Base class for all filter updater failures."""


class DuplicateError(FilterUpdaterError):
    """A filter with the same name or URL is already registered."""

    def __init__(self, name: str, url: str) -> None:
        super().__init__(f"Filter with this name or URL already exists: {name} ({url})")
        self.name = name
        self.url = url


class NetworkError(FilterUpdaterError):
    """The transport call itself failed (DNS, connect, timeout, ...)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Couldn't download filter from {url}: {reason}")
        self.url = url


class ProtocolError(FilterUpdaterError):
    """The server answered with a non-success status."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Couldn't download filter from {url}: status code {status_code}")
        self.url = url
        self.status_code = status_code


class FilterIOError(FilterUpdaterError, OSError):
    """Reading, writing or renaming a filter file failed."""


__all__ = [
    "DuplicateError",
    "FilterIOError",
    "FilterUpdaterError",
    "NetworkError",
    "ProtocolError",
]
