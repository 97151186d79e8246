"""Fund configuration repository protocol."""

from __future__ import annotations

from typing import Protocol

from ..fund import FundConfiguration


class FundConfigRepository(Protocol):
    """Persistence for the singleton fund configuration."""

    def load(self) -> FundConfiguration:
        """Return the saved configuration, or defaults when none was saved."""
        ...

    def save(self, config: FundConfiguration) -> FundConfiguration:
        """Replace the saved configuration."""
        ...
