"""Repository protocol definitions for domain layer."""

from .config import FundConfigRepository
from .data_source import FundDataSource
from .snapshot import SnapshotRepository

__all__ = [
    "FundConfigRepository",
    "FundDataSource",
    "SnapshotRepository",
]
