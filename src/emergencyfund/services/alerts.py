"""User-facing alerts when runway drops below target."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .runway import RunwayResult, RunwayStatus

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivers a warning to the user (toast, console line, ...)."""

    def warning(self, message: str, description: str | None = None) -> None:  # pragma: no cover - interface
        ...


class LoggingNotifier:
    """Notifier that writes alerts to the package log."""

    def warning(self, message: str, description: str | None = None) -> None:
        logger.warning(message, extra={"description": description})


def alert_text(result: RunwayResult) -> tuple[str, str]:
    """Return (message, description) for a non-OnTrack result."""

    if result.status is RunwayStatus.CRITICAL:
        message = "Emergency fund is critically low"
    else:
        message = "Emergency fund is below target"
    description = (
        f"{result.months_of_runway:.1f} months of runway "
        f"(target: {result.target_months:.1f} months)"
    )
    return message, description


class StatusAlerter:
    """Sends a warning for Warning/Critical results.

    By default every non-OnTrack evaluation alerts. With ``dedupe=True`` an
    alert is sent only when the status differs from the previous evaluation.
    """

    def __init__(self, notifier: Notifier, *, dedupe: bool = False) -> None:
        self.notifier = notifier
        self.dedupe = dedupe
        self._last_status: Optional[RunwayStatus] = None

    def observe(self, result: RunwayResult) -> bool:
        """Record a result; return True when an alert was sent."""

        previous, self._last_status = self._last_status, result.status
        if not result.status.needs_attention:
            return False
        if self.dedupe and previous is result.status:
            return False
        message, description = alert_text(result)
        self.notifier.warning(message, description)
        return True
