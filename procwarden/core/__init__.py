"""Core poll loop."""

from .monitor_loop import CycleReport, MonitorLoop

__all__ = ["CycleReport", "MonitorLoop"]
