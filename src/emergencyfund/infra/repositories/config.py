"""SQLModel implementation of the fund configuration repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from ...domain.allocation import decode_allocations, encode_allocations, ensure_unique_accounts
from ...domain.fund import (
    EstimatorKind,
    FundConfiguration,
    decode_id_list,
    decode_tag_list,
    encode_id_list,
    encode_tag_list,
)
from ...models.fund_config import CONFIG_ROW_ID, EmergencyFundConfig


def config_from_row(row: EmergencyFundConfig) -> FundConfiguration:
    """Decode the persisted row into a typed configuration."""

    return FundConfiguration(
        linked_goal_id=row.linked_goal_id,
        target_months=None if row.target_months is None else float(row.target_months),
        target_months_is_override=bool(row.target_months_is_override),
        manual_allocations=tuple(decode_allocations(row.fund_allocations)),
        expense_account_ids=decode_id_list(row.expense_account_ids),
        excluded_tags=decode_tag_list(row.excluded_tags),
        lookback_months=int(row.lookback_months),
        estimator=EstimatorKind.parse(row.calculation_method),
    )


class SQLModelFundConfigRepository:
    """Reads and writes the single ``emergency_fund_config`` row."""

    def __init__(self, session_factory: Callable[[], Session], *, default_lookback_months: int = 6):
        self.session_factory = session_factory
        self.default_lookback_months = default_lookback_months

    def load(self) -> FundConfiguration:
        with self.session_factory() as session:
            row = session.get(EmergencyFundConfig, CONFIG_ROW_ID)
            if row is None:
                return FundConfiguration(lookback_months=self.default_lookback_months)
            return config_from_row(row)

    def save(self, config: FundConfiguration) -> FundConfiguration:
        allocations = ensure_unique_accounts(config.manual_allocations)
        try:
            return self._write(config, allocations)
        except IntegrityError:
            # A concurrent first save created the row; update it instead.
            return self._write(config, allocations)

    def _write(self, config: FundConfiguration, allocations) -> FundConfiguration:
        with self.session_factory() as session:
            row = session.get(EmergencyFundConfig, CONFIG_ROW_ID)
            if row is None:
                row = EmergencyFundConfig(id=CONFIG_ROW_ID)
            row.linked_goal_id = config.linked_goal_id
            row.target_months = config.target_months
            row.target_months_is_override = config.target_months_is_override
            row.fund_allocations = encode_allocations(allocations)
            row.expense_account_ids = encode_id_list(config.expense_account_ids)
            row.excluded_tags = encode_tag_list(config.excluded_tags)
            row.lookback_months = config.lookback_months
            row.calculation_method = config.estimator.value
            row.updated_at = datetime.now(timezone.utc)
            session.add(row)
            session.commit()
            session.refresh(row)
            return config_from_row(row)


__all__ = ["SQLModelFundConfigRepository", "config_from_row"]
