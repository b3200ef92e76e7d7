"""
Adapter for the borrowed-asset ERC20 token.
"""

from ..abi import LENDING_TOKEN_ABI
from ..connection import ChainConnection
from ..types import Receipt
from ..utils import normalize_address
from .base import BaseContractAdapter
from .platform import as_uint


class LendingTokenAdapter(BaseContractAdapter):
    """Balances, allowances and the test faucet"""

    def __init__(self, connection: ChainConnection, address: str,
                 call_timeout: float = 10.0, receipt_timeout: float = 60.0):
        super().__init__(connection, address, LENDING_TOKEN_ABI,
                         call_timeout=call_timeout, receipt_timeout=receipt_timeout)

    async def balance_of(self, address: str) -> int:
        raw = await self._call("balanceOf", normalize_address(address))
        return as_uint(raw, "balanceOf")

    async def allowance(self, owner: str, spender: str) -> int:
        raw = await self._call("allowance", normalize_address(owner), normalize_address(spender))
        return as_uint(raw, "allowance")

    async def approve(self, spender: str, amount: int) -> Receipt:
        return await self._transact("approve", normalize_address(spender), amount)

    async def faucet(self) -> Receipt:
        return await self._transact("faucet")
