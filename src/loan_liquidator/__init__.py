"""
Loan Liquidator

Watches the loans of a peer-to-peer lending platform and liquidates the
ones whose collateral has fallen below the platform's safety threshold.
"""

from .types import (
    TransactionStatus,
    LoanOutcome,
    Receipt,
    LiquidatorError,
    ConnectivityError,
    LoanNotFoundError,
    ActionRejectedError,
    DecodingError,
    ConfigurationError
)

from .models import (
    Loan,
    LoanEvaluation,
    ScanReport
)

from .interfaces import (
    ILoanLedger,
    IFungibleAsset
)

from .collateral import (
    WAD,
    LIQUIDATION_THRESHOLD_PERCENT,
    collateral_value,
    liquidation_threshold,
    is_undercollateralized,
    collateralization_ratio
)

from .monitor import LiquidationMonitor, FailureTracker
from .scheduler import PollingScheduler
from .config import Settings, load_settings

__all__ = [
    # Types
    "TransactionStatus",
    "LoanOutcome",
    "Receipt",
    "LiquidatorError",
    "ConnectivityError",
    "LoanNotFoundError",
    "ActionRejectedError",
    "DecodingError",
    "ConfigurationError",

    # Models
    "Loan",
    "LoanEvaluation",
    "ScanReport",

    # Interfaces
    "ILoanLedger",
    "IFungibleAsset",

    # Collateral math
    "WAD",
    "LIQUIDATION_THRESHOLD_PERCENT",
    "collateral_value",
    "liquidation_threshold",
    "is_undercollateralized",
    "collateralization_ratio",

    # Monitor & scheduling
    "LiquidationMonitor",
    "FailureTracker",
    "PollingScheduler",

    # Configuration
    "Settings",
    "load_settings"
]

__version__ = "1.0.0"
