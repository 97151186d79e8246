"""Service module exports."""

from . import alerts, allocation, engine, expenses, reports, runway, snapshots, targets

__all__ = [
    "alerts",
    "allocation",
    "engine",
    "expenses",
    "reports",
    "runway",
    "snapshots",
    "targets",
]
