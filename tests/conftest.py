"""
Shared fixtures: an in-memory ledger and a loan factory.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from loan_liquidator import WAD, Loan, LoanNotFoundError, Receipt, TransactionStatus

BORROWER = "0x" + "11" * 20
LENDER = "0x" + "22" * 20
LIQUIDATOR = "0x" + "33" * 20
ZERO = "0x" + "00" * 20


def make_loan(loan_id: int, amount: int = 1000 * WAD, collateral_amount: int = WAD,
              active: bool = True, funded: bool = True) -> Loan:
    return Loan(
        id=loan_id,
        borrower=BORROWER,
        lender=LENDER if funded else ZERO,
        amount=amount,
        collateral_amount=collateral_amount,
        interest=50 * WAD,
        start_time=1_700_000_000 if funded else 0,
        duration=30 * 24 * 3600,
        active=active,
        funded=funded,
        ipfs_hash="QmTestAgreement",
        loan_agreement_hash="0x" + "ab" * 32,
    )


class FakeLedger:
    """In-memory ledger that records every call the monitor makes"""

    def __init__(self, loans: Optional[List[Loan]] = None, price: int = 2000 * WAD):
        self.loans: Dict[int, Loan] = {loan.id: loan for loan in loans or []}
        self.price = price
        self.count: Optional[int] = None
        self.count_error: Optional[Exception] = None
        self.loan_errors: Dict[int, Exception] = {}
        self.price_error: Optional[Exception] = None
        self.liquidate_errors: Dict[int, Exception] = {}
        self.liquidate_gate: Optional[asyncio.Event] = None

        self.loan_reads: List[int] = []
        self.price_reads = 0
        self.liquidations: List[int] = []

    def add(self, *loans: Loan) -> "FakeLedger":
        for loan in loans:
            self.loans[loan.id] = loan
        return self

    async def loan_count(self) -> int:
        if self.count_error is not None:
            raise self.count_error
        if self.count is not None:
            return self.count
        return max(self.loans, default=0)

    async def get_loan(self, loan_id: int) -> Loan:
        self.loan_reads.append(loan_id)
        if loan_id in self.loan_errors:
            raise self.loan_errors[loan_id]
        if loan_id not in self.loans:
            raise LoanNotFoundError(f"Loan #{loan_id} does not exist")
        return self.loans[loan_id]

    async def current_collateral_price(self) -> int:
        self.price_reads += 1
        if self.price_error is not None:
            raise self.price_error
        return self.price

    async def liquidate(self, loan_id: int) -> Receipt:
        self.liquidations.append(loan_id)
        if self.liquidate_gate is not None:
            await self.liquidate_gate.wait()
        if loan_id in self.liquidate_errors:
            raise self.liquidate_errors[loan_id]
        self.loans[loan_id] = self.loans[loan_id].model_copy(update={"active": False})
        return Receipt(
            transaction_hash="0x" + f"{loan_id:064x}",
            block_number=100 + loan_id,
            gas_used=90_000,
            status=TransactionStatus.CONFIRMED,
            from_address=LIQUIDATOR,
        )


@pytest.fixture
def loan_factory():
    return make_loan


@pytest.fixture
def fake_ledger():
    return FakeLedger()
