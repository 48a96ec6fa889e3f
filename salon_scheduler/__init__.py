"""Slot-and-booking scheduling engine for appointment-based service businesses."""

from salon_scheduler.scheduler import Scheduler, create_scheduler

__all__ = ["Scheduler", "create_scheduler"]

__version__ = "0.1.0"
