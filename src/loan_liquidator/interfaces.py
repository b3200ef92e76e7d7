"""
Interfaces (protocols) for the contracts the bot talks to.
Using Python's Protocol for structural subtyping.
"""

from typing import Protocol
from abc import abstractmethod

from .models import Loan
from .types import Receipt


class ILoanLedger(Protocol):
    """Read and liquidate access to the lending platform"""

    @abstractmethod
    async def loan_count(self) -> int:
        """Highest assigned loan id, 0 if none"""
        ...

    @abstractmethod
    async def get_loan(self, loan_id: int) -> Loan:
        """Full record for a loan id"""
        ...

    @abstractmethod
    async def current_collateral_price(self) -> int:
        """Collateral price in borrowed-asset units, 18-decimal fixed point"""
        ...

    @abstractmethod
    async def liquidate(self, loan_id: int) -> Receipt:
        """Submit a liquidation and wait for it to be mined"""
        ...


class IFungibleAsset(Protocol):
    """The borrowed-asset token"""

    @abstractmethod
    async def balance_of(self, address: str) -> int:
        ...

    @abstractmethod
    async def allowance(self, owner: str, spender: str) -> int:
        ...

    @abstractmethod
    async def approve(self, spender: str, amount: int) -> Receipt:
        ...

    @abstractmethod
    async def faucet(self) -> Receipt:
        """Mint test tokens to the caller"""
        ...
