"""
Adapter for the lending platform contract (the ledger the bot watches).
"""

import logging
from typing import Any

from ..abi import LENDING_PLATFORM_ABI
from ..connection import ChainConnection
from ..models import Loan
from ..types import ConnectivityError, DecodingError, LoanNotFoundError, Receipt
from .base import BaseContractAdapter

logger = logging.getLogger(__name__)


def as_uint(value: Any, method: str) -> int:
    """Validate a uint256 return value"""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DecodingError(f"{method} returned {value!r}, expected an unsigned integer")
    return value


class LendingPlatformAdapter(BaseContractAdapter):
    """Read loans, read the collateral price and submit liquidations"""

    def __init__(self, connection: ChainConnection, address: str,
                 call_timeout: float = 10.0, receipt_timeout: float = 60.0):
        super().__init__(connection, address, LENDING_PLATFORM_ABI,
                         call_timeout=call_timeout, receipt_timeout=receipt_timeout)

    async def loan_count(self) -> int:
        raw = await self._call("loanCounter", revert_error=DecodingError)
        return as_uint(raw, "loanCounter")

    async def get_loan(self, loan_id: int) -> Loan:
        raw = await self._call("loans", loan_id, revert_error=LoanNotFoundError)
        loan = Loan.from_contract_result(raw)
        if not loan.exists:
            raise LoanNotFoundError(f"Loan #{loan_id} does not exist")
        if loan.id != loan_id:
            raise DecodingError(f"Requested loan #{loan_id}, ledger returned #{loan.id}")
        return loan

    async def current_collateral_price(self) -> int:
        """Collateral price as used by the platform's own liquidation check (1e18 scale)"""
        raw = await self._call("getEthPrice", revert_error=ConnectivityError)
        price = as_uint(raw, "getEthPrice")
        if price == 0:
            raise DecodingError("getEthPrice returned 0, price feed is unset")
        return price

    async def liquidate(self, loan_id: int) -> Receipt:
        return await self._transact("liquidate", loan_id)
