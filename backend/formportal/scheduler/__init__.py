"""Background jobs"""
from .reconciliation_scheduler import get_scheduler, start_scheduler, stop_scheduler

__all__ = ["get_scheduler", "start_scheduler", "stop_scheduler"]
