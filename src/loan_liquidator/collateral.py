"""
Collateralization math.

All values are integers. Prices are 18-decimal fixed point, matching the
lending platform's own `getEthPrice()` accessor, so the prediction made here
agrees with the contract's check at liquidation time.
"""

from decimal import Decimal
from typing import Optional

from .models import Loan

WAD = 10 ** 18

# Liquidation threshold as a percentage of principal. Interest is not included.
LIQUIDATION_THRESHOLD_PERCENT = 105


def collateral_value(collateral_amount: int, price: int) -> int:
    """Market value of the collateral in borrowed-asset units"""
    # multiply first to keep fixed-point precision
    return (collateral_amount * price) // WAD


def liquidation_threshold(principal: int) -> int:
    return (principal * LIQUIDATION_THRESHOLD_PERCENT) // 100


def is_undercollateralized(loan: Loan, price: int) -> bool:
    """True when collateral value is strictly below 105% of principal"""
    return collateral_value(loan.collateral_amount, price) < liquidation_threshold(loan.amount)


def collateralization_ratio(loan: Loan, price: int) -> Optional[Decimal]:
    """Collateral value over principal, None for a zero-principal loan"""
    if loan.amount == 0:
        return None
    return Decimal(collateral_value(loan.collateral_amount, price)) / Decimal(loan.amount)
