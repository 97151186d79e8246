"""SQLModel table exports."""

from .account import Account, AccountBalanceSnapshot
from .fund_config import EmergencyFundConfig
from .goal import Goal
from .snapshot import EmergencyFundSnapshot
from .transaction import Transaction, TransactionTag

__all__ = [
    "Account",
    "AccountBalanceSnapshot",
    "EmergencyFundConfig",
    "EmergencyFundSnapshot",
    "Goal",
    "Transaction",
    "TransactionTag",
]
