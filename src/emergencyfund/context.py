"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import (
    SQLModelFundConfigRepository,
    SQLModelFundDataSource,
    SQLModelSnapshotRepository,
)
from .services.alerts import LoggingNotifier, Notifier, StatusAlerter
from .services.engine import RunwayEngine


@dataclass
class AppContext:
    """Configuration, repositories and the engine wired together."""

    config: BaseConfig
    session_factory: Callable[[], Session]
    data_source: SQLModelFundDataSource
    config_repo: SQLModelFundConfigRepository
    snapshot_repo: SQLModelSnapshotRepository
    engine: RunwayEngine


def create_app_context(
    config: Optional[BaseConfig] = None, *, notifier: Optional[Notifier] = None
) -> AppContext:
    """Create the database (if needed) and build the runway engine."""

    if config is None:
        config = BaseConfig()

    _, session_factory = bootstrap_database(config)

    data_source = SQLModelFundDataSource(session_factory)
    config_repo = SQLModelFundConfigRepository(
        session_factory, default_lookback_months=config.DEFAULT_LOOKBACK_MONTHS
    )
    snapshot_repo = SQLModelSnapshotRepository(session_factory)
    alerter = StatusAlerter(notifier or LoggingNotifier(), dedupe=config.DEDUPE_ALERTS)

    return AppContext(
        config=config,
        session_factory=session_factory,
        data_source=data_source,
        config_repo=config_repo,
        snapshot_repo=snapshot_repo,
        engine=RunwayEngine(
            data_source,
            config_repo,
            snapshot_repo,
            alerter=alerter,
            default_target_months=config.DEFAULT_TARGET_MONTHS,
        ),
    )
