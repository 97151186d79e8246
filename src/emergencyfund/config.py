"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be numeric, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "EmergencyFund"
    DB_FILENAME = "emergencyfund.db"
    ENV_PREFIX = "EMERGENCYFUND_"
    TESTING = False

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool(f"{self.ENV_PREFIX}DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv(f"{self.ENV_PREFIX}DATABASE_URL", self._build_sqlite_url())
        self.DEFAULT_TARGET_MONTHS = _env_number(f"{self.ENV_PREFIX}DEFAULT_TARGET_MONTHS", 6.0)
        self.DEFAULT_LOOKBACK_MONTHS = int(
            _env_number(f"{self.ENV_PREFIX}DEFAULT_LOOKBACK_MONTHS", 6)
        )
        self.DEDUPE_ALERTS = _env_bool(f"{self.ENV_PREFIX}DEDUPE_ALERTS", default=False)
        if self.DEFAULT_TARGET_MONTHS <= 0:
            raise ValueError("DEFAULT_TARGET_MONTHS must be positive.")
        if self.DEFAULT_LOOKBACK_MONTHS < 1:
            raise ValueError("DEFAULT_LOOKBACK_MONTHS must be at least 1.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv(f"{self.ENV_PREFIX}DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        # Repositories are called from worker threads by the async engine.
        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class TestingConfig(BaseConfig):
    """Isolated configuration for tests; callers pass their own data dir."""

    __test__ = False  # keep pytest from collecting it

    TESTING = True

    def __init__(self, data_dir: Path) -> None:
        self._data_dir_override = Path(data_dir)
        super().__init__()
        self.DATABASE_URL = self._build_sqlite_url()

    def _resolve_data_dir(self) -> Path:
        self._data_dir_override.mkdir(parents=True, exist_ok=True)
        return self._data_dir_override.resolve()
