"""
Connection to the EVM node and resolution of the bot's signing identity.
"""

import asyncio
import logging
from typing import Optional

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.exceptions import (
    BadResponseFormat, ProviderConnectionError, TooManyRequests, Web3RPCError
)

from .types import ConfigurationError, ConnectivityError
from .utils import normalize_address, validate_address

logger = logging.getLogger(__name__)

# Failures of the node or the transport. Contract and ABI faults are not included.
TRANSPORT_ERRORS = (
    asyncio.TimeoutError, aiohttp.ClientError, OSError,
    ProviderConnectionError, TooManyRequests, BadResponseFormat, Web3RPCError,
)


class ChainConnection:
    """
    Owns the web3 client and the account that signs liquidations.

    The identity is either a local private key or, for development nodes,
    an unlocked node account picked by index.
    """

    def __init__(self,
                 rpc_url: str,
                 private_key: Optional[str] = None,
                 signer_index: int = 2,
                 connection_timeout: float = 10.0):
        self.rpc_url = rpc_url
        self.signer_index = signer_index
        self.connection_timeout = connection_timeout
        self.w3: Optional[AsyncWeb3] = None
        self.account: Optional[LocalAccount] = Account.from_key(private_key) if private_key else None
        self.address: Optional[str] = self.account.address if self.account else None
        self.chain_id: Optional[int] = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Connect to the node and resolve the signing identity"""
        provider = AsyncWeb3.AsyncHTTPProvider(
            self.rpc_url, request_kwargs={"timeout": self.connection_timeout}
        )
        self.w3 = AsyncWeb3(provider)

        try:
            connected = await asyncio.wait_for(self.w3.is_connected(), timeout=self.connection_timeout)
            if connected:
                self.chain_id = await asyncio.wait_for(self.w3.eth.chain_id, timeout=self.connection_timeout)
        except TRANSPORT_ERRORS as e:
            raise ConnectivityError(f"Could not reach {self.rpc_url}: {e}")
        if not connected:
            raise ConnectivityError(f"Failed to connect to {self.rpc_url}")

        self._connected = True
        logger.info(f"Connected to chain {self.chain_id} at {self.rpc_url}")

        if self.address is None:
            self.address = await self._node_account()
        logger.info(f"Liquidator identity: {self.address}")

    async def _node_account(self) -> str:
        try:
            accounts = await asyncio.wait_for(self.w3.eth.accounts, timeout=self.connection_timeout)
        except TRANSPORT_ERRORS as e:
            raise ConnectivityError(f"Could not list node accounts: {e}")
        if len(accounts) <= self.signer_index:
            raise ConfigurationError(
                f"Node exposes {len(accounts)} account(s), cannot use signer index {self.signer_index}"
            )
        return normalize_address(accounts[self.signer_index])

    async def ensure_contract(self, address: str) -> str:
        """Check that a contract is deployed at `address`"""
        if not validate_address(address):
            raise ConfigurationError(f"Invalid contract address: {address}")
        address = normalize_address(address)
        try:
            code = await asyncio.wait_for(self.w3.eth.get_code(address), timeout=self.connection_timeout)
        except TRANSPORT_ERRORS as e:
            raise ConnectivityError(f"Could not read code at {address}: {e}")
        if not code:
            raise ConfigurationError(f"No contract deployed at {address}")
        return address

    async def disconnect(self) -> None:
        """Disconnect from the node"""
        if self.w3 and hasattr(self.w3.provider, 'disconnect'):
            await self.w3.provider.disconnect()
        self._connected = False
        logger.info(f"Disconnected from {self.rpc_url}")
