"""Cache adapters - Process-local expiring stores."""

from .memory import InMemoryExpiringStore, Scheduler, SweeperScheduler, default_scheduler

__all__ = ["InMemoryExpiringStore", "Scheduler", "SweeperScheduler", "default_scheduler"]
