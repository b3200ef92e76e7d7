"""
Core types, enums and the error taxonomy used by the liquidation bot.
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass


class TransactionStatus(Enum):
    """Transaction status states"""
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


class LoanOutcome(Enum):
    """Result of evaluating a single loan during a scan"""
    NOT_FOUND = "not_found"
    INELIGIBLE = "ineligible"  # inactive or unfunded
    HEALTHY = "healthy"
    LIQUIDATED = "liquidated"
    LIQUIDATION_FAILED = "liquidation_failed"
    ERROR = "error"


@dataclass(frozen=True)
class Receipt:
    """Confirmation of a mined transaction"""
    transaction_hash: str
    block_number: int
    gas_used: int
    status: TransactionStatus
    from_address: Optional[str] = None
    to_address: Optional[str] = None


class LiquidatorError(Exception):
    """Base exception for liquidation bot operations"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)


class ConnectivityError(LiquidatorError):
    """Transient failure reaching the ledger or its node"""
    pass


class LoanNotFoundError(LiquidatorError):
    """Loan id does not exist on the ledger"""
    pass


class ActionRejectedError(LiquidatorError):
    """The ledger refused a submitted action"""
    pass


class DecodingError(LiquidatorError):
    """A contract call returned data of an unexpected shape"""
    pass


class ConfigurationError(LiquidatorError):
    """Missing or invalid startup configuration"""
    pass
