"""Scheduling of refresh cycles."""

from .apsched_adapter import REFRESH_JOB_ID, FilterScheduler
from .refresh_loop import CycleReport, CycleState, RefreshLoop

__all__ = ["CycleReport", "CycleState", "FilterScheduler", "REFRESH_JOB_ID", "RefreshLoop"]
