"""
Base contract adapter with the call/transact plumbing shared by all contracts.
"""

import asyncio
import logging
from typing import Any, Dict, List, Type

from web3.exceptions import BadFunctionCallOutput, ContractLogicError, TimeExhausted

from ..connection import ChainConnection, TRANSPORT_ERRORS
from ..types import (
    ActionRejectedError, ConnectivityError, DecodingError, LiquidatorError, Receipt, TransactionStatus
)
from ..utils import normalize_address

logger = logging.getLogger(__name__)


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


class BaseContractAdapter:
    """
    Wraps one deployed contract.

    Every round trip runs under a timeout. web3 exceptions are translated
    into the bot's error taxonomy here and nowhere else.
    """

    def __init__(self,
                 connection: ChainConnection,
                 address: str,
                 abi: List[Dict[str, Any]],
                 call_timeout: float = 10.0,
                 receipt_timeout: float = 60.0):
        self.connection = connection
        self.address = normalize_address(address)
        self.call_timeout = call_timeout
        self.receipt_timeout = receipt_timeout
        self.contract = connection.w3.eth.contract(address=self.address, abi=abi)

    @property
    def w3(self):
        return self.connection.w3

    async def _call(self, method: str, *args: Any,
                    revert_error: Type[LiquidatorError] = ActionRejectedError) -> Any:
        """Call a read-only contract method"""
        fn = getattr(self.contract.functions, method)(*args)
        try:
            return await asyncio.wait_for(fn.call(), timeout=self.call_timeout)
        except ContractLogicError as e:
            raise revert_error(f"{method} reverted: {_describe(e)}", error_code="revert")
        except BadFunctionCallOutput as e:
            raise DecodingError(f"{method} returned undecodable output: {_describe(e)}")
        except TRANSPORT_ERRORS as e:
            raise ConnectivityError(f"{method} failed: {_describe(e)}")

    async def _transact(self, method: str, *args: Any) -> Receipt:
        """Submit a state-changing call and wait for it to be mined"""
        fn = getattr(self.contract.functions, method)(*args)
        sender = self.connection.address
        try:
            nonce = await asyncio.wait_for(
                self.w3.eth.get_transaction_count(sender, "pending"), timeout=self.call_timeout
            )
            # gas estimation inside build_transaction surfaces reverts early
            tx = await asyncio.wait_for(
                fn.build_transaction({"from": sender, "nonce": nonce}), timeout=self.call_timeout
            )
            if self.connection.account is not None:
                signed = self.connection.account.sign_transaction(tx)
                tx_hash = await asyncio.wait_for(
                    self.w3.eth.send_raw_transaction(signed.raw_transaction), timeout=self.call_timeout
                )
            else:
                tx_hash = await asyncio.wait_for(
                    self.w3.eth.send_transaction(tx), timeout=self.call_timeout
                )
        except ContractLogicError as e:
            raise ActionRejectedError(f"{method} rejected: {_describe(e)}", error_code="revert")
        except TRANSPORT_ERRORS as e:
            raise ConnectivityError(f"{method} could not be submitted: {_describe(e)}")

        logger.debug(f"Submitted {method} in {_to_hex(tx_hash)}")

        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except TimeExhausted:
            raise ConnectivityError(
                f"{method} transaction {_to_hex(tx_hash)} not mined within {self.receipt_timeout}s",
                error_code="receipt_timeout"
            )
        except TRANSPORT_ERRORS as e:
            raise ConnectivityError(f"Could not fetch receipt for {_to_hex(tx_hash)}: {_describe(e)}")

        result = self._build_receipt(receipt)
        if result.status is TransactionStatus.REVERTED:
            raise ActionRejectedError(
                f"{method} reverted in transaction {result.transaction_hash}", error_code="reverted"
            )
        return result

    def _build_receipt(self, receipt: Dict[str, Any]) -> Receipt:
        """Build Receipt from a web3 transaction receipt"""
        status = TransactionStatus.CONFIRMED if receipt['status'] == 1 else TransactionStatus.REVERTED
        return Receipt(
            transaction_hash=_to_hex(receipt['transactionHash']),
            block_number=receipt['blockNumber'],
            gas_used=receipt['gasUsed'],
            status=status,
            from_address=receipt.get('from'),
            to_address=receipt.get('to'),
        )
