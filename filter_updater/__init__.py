"""Keep downloaded filter lists in sync with their upstream URLs."""

from .commit import CommitManager, CommitReport, NullProxyController, ProxyController
from .errors import DuplicateError, FilterIOError, FilterUpdaterError, NetworkError, ProtocolError
from .registry import FilterEntry, FilterRegistry
from .updater import FilterUpdater

__all__ = [
    "CommitManager",
    "CommitReport",
    "DuplicateError",
    "FilterEntry",
    "FilterIOError",
    "FilterRegistry",
    "FilterUpdater",
    "FilterUpdaterError",
    "NetworkError",
    "NullProxyController",
    "ProtocolError",
    "ProxyController",
]

__version__ = "0.1.0"
