"""Concrete repository implementations using SQLModel."""

from .config import SQLModelFundConfigRepository
from .data_source import SQLModelFundDataSource
from .snapshot import SQLModelSnapshotRepository

__all__ = [
    "SQLModelFundConfigRepository",
    "SQLModelFundDataSource",
    "SQLModelSnapshotRepository",
]
