"""Error taxonomy for the runway engine."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class EmergencyFundError(Exception):
    """Base class for engine errors."""


class CalculationFailed(EmergencyFundError):
    """A data-source read or write failed while computing or persisting runway.

    ``action`` names the step that failed ("load balances", "save snapshot", ...)
    and ``message`` carries the underlying error text.
    """

    def __init__(self, action: str, message: str) -> None:
        super().__init__(f"{action} failed: {message}")
        self.action = action
        self.message = message


@contextmanager
def failures_reported_as(action: str) -> Iterator[None]:
    """Re-raise any data-source error inside the block as ``CalculationFailed``."""

    try:
        yield
    except EmergencyFundError:
        raise
    except Exception as exc:
        logger.error("%s failed", action, exc_info=True, extra={"action": action})
        raise CalculationFailed(action, str(exc)) from exc
