"""Engine components: fetch → summarize → store."""

from .fetcher import Fetcher
from .parser import summarize
from .storage import FilterStorage

__all__ = ["Fetcher", "FilterStorage", "summarize"]
