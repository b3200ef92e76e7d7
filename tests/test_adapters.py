"""
Tests for the contract adapters with a mocked web3 client.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from hexbytes import HexBytes
from web3.exceptions import (
    BadFunctionCallOutput, ContractLogicError, TimeExhausted, TooManyRequests, Web3ValidationError
)

from loan_liquidator import (
    ActionRejectedError, ConnectivityError, DecodingError, LoanNotFoundError, TransactionStatus
)
from loan_liquidator.adapters import LendingPlatformAdapter, LendingTokenAdapter

PLATFORM = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
TOKEN = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
BOT = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
BORROWER = "0x" + "11" * 20
LENDER = "0x" + "22" * 20
ZERO = "0x" + "00" * 20
TX_HASH = HexBytes(b"\x01" * 32)


def loan_tuple(loan_id=1, borrower=BORROWER, active=True):
    return (loan_id, borrower, LENDER, 1000, 1, 50, 1_700_000_000, 86400,
            active, True, "QmAgreement", HexBytes(b"\xab" * 32))


def mined(status=1):
    return {
        "transactionHash": TX_HASH,
        "blockNumber": 42,
        "gasUsed": 88_000,
        "status": status,
        "from": BOT,
        "to": PLATFORM,
    }


@pytest.fixture
def contract():
    return Mock()


@pytest.fixture
def connection(contract):
    conn = Mock()
    conn.address = BOT
    conn.account = None
    conn.w3.eth.contract.return_value = contract
    conn.w3.eth.get_transaction_count = AsyncMock(return_value=7)
    conn.w3.eth.send_transaction = AsyncMock(return_value=TX_HASH)
    conn.w3.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH)
    conn.w3.eth.wait_for_transaction_receipt = AsyncMock(return_value=mined())
    return conn


@pytest.fixture
def platform(connection):
    return LendingPlatformAdapter(connection, PLATFORM, call_timeout=0.05, receipt_timeout=1)


def returns(contract, method, value=None, side_effect=None):
    fn = getattr(contract.functions, method)
    fn.return_value.call = AsyncMock(return_value=value, side_effect=side_effect)
    return fn


class TestLendingPlatformReads:
    """Reads are validated and errors translated"""

    @pytest.mark.asyncio
    async def test_loan_count(self, platform, contract):
        returns(contract, "loanCounter", 3)

        assert await platform.loan_count() == 3

    @pytest.mark.asyncio
    async def test_loan_count_rejects_malformed_value(self, platform, contract):
        returns(contract, "loanCounter", True)

        with pytest.raises(DecodingError):
            await platform.loan_count()

    @pytest.mark.asyncio
    async def test_get_loan_decodes_record(self, platform, contract):
        loans = returns(contract, "loans", loan_tuple(loan_id=4))

        loan = await platform.get_loan(4)

        loans.assert_called_once_with(4)
        assert loan.id == 4
        assert loan.is_eligible

    @pytest.mark.asyncio
    async def test_get_loan_empty_slot_is_not_found(self, platform, contract):
        returns(contract, "loans", loan_tuple(loan_id=0, borrower=ZERO, active=False))

        with pytest.raises(LoanNotFoundError):
            await platform.get_loan(9)

    @pytest.mark.asyncio
    async def test_get_loan_revert_is_not_found(self, platform, contract):
        returns(contract, "loans", side_effect=ContractLogicError("execution reverted"))

        with pytest.raises(LoanNotFoundError):
            await platform.get_loan(9)

    @pytest.mark.asyncio
    async def test_get_loan_id_mismatch(self, platform, contract):
        returns(contract, "loans", loan_tuple(loan_id=2))

        with pytest.raises(DecodingError):
            await platform.get_loan(3)

    @pytest.mark.asyncio
    async def test_hung_call_times_out(self, platform, contract):
        async def hang():
            await asyncio.sleep(5)

        contract.functions.loans.return_value.call = hang

        with pytest.raises(ConnectivityError):
            await platform.get_loan(1)

    @pytest.mark.asyncio
    async def test_transport_error_is_connectivity(self, platform, contract):
        returns(contract, "loanCounter", side_effect=ConnectionRefusedError("refused"))

        with pytest.raises(ConnectivityError, match="refused"):
            await platform.loan_count()

    @pytest.mark.asyncio
    async def test_rate_limited_node_is_connectivity(self, platform, contract):
        returns(contract, "getEthPrice", side_effect=TooManyRequests("rate limited"))

        with pytest.raises(ConnectivityError, match="rate limited"):
            await platform.current_collateral_price()

    @pytest.mark.asyncio
    async def test_undecodable_output_is_decoding_error(self, platform, contract):
        returns(contract, "loans", side_effect=BadFunctionCallOutput("Could not decode contract function call"))

        with pytest.raises(DecodingError, match="undecodable"):
            await platform.get_loan(1)

    @pytest.mark.asyncio
    async def test_validation_fault_is_not_connectivity(self, platform, contract):
        returns(contract, "loanCounter", side_effect=Web3ValidationError("bad argument"))

        with pytest.raises(Web3ValidationError):
            await platform.loan_count()

    @pytest.mark.asyncio
    async def test_price(self, platform, contract):
        returns(contract, "getEthPrice", 2000 * 10 ** 18)

        assert await platform.current_collateral_price() == 2000 * 10 ** 18

    @pytest.mark.asyncio
    async def test_zero_price_is_rejected(self, platform, contract):
        returns(contract, "getEthPrice", 0)

        with pytest.raises(DecodingError):
            await platform.current_collateral_price()


class TestLendingPlatformLiquidate:
    """Liquidation submission and receipt handling"""

    @pytest.mark.asyncio
    async def test_liquidate_with_node_account(self, platform, contract, connection):
        liquidate = contract.functions.liquidate
        liquidate.return_value.build_transaction = AsyncMock(return_value={"to": PLATFORM, "gas": 100_000})

        receipt = await platform.liquidate(3)

        liquidate.assert_called_once_with(3)
        liquidate.return_value.build_transaction.assert_awaited_once_with({"from": BOT, "nonce": 7})
        connection.w3.eth.send_transaction.assert_awaited_once()
        assert receipt.status is TransactionStatus.CONFIRMED
        assert receipt.transaction_hash == "0x" + "01" * 32
        assert receipt.block_number == 42

    @pytest.mark.asyncio
    async def test_liquidate_with_local_key(self, platform, contract, connection):
        connection.account = Mock()
        connection.account.sign_transaction.return_value = Mock(raw_transaction=b"signed")
        contract.functions.liquidate.return_value.build_transaction = AsyncMock(return_value={"gas": 1})

        await platform.liquidate(3)

        connection.w3.eth.send_raw_transaction.assert_awaited_once_with(b"signed")
        connection.w3.eth.send_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_estimation_revert_is_rejected(self, platform, contract):
        contract.functions.liquidate.return_value.build_transaction = AsyncMock(
            side_effect=ContractLogicError("execution reverted: Loan is healthy")
        )

        with pytest.raises(ActionRejectedError, match="Loan is healthy"):
            await platform.liquidate(3)

    @pytest.mark.asyncio
    async def test_reverted_receipt_is_rejected(self, platform, contract, connection):
        contract.functions.liquidate.return_value.build_transaction = AsyncMock(return_value={})
        connection.w3.eth.wait_for_transaction_receipt = AsyncMock(return_value=mined(status=0))

        with pytest.raises(ActionRejectedError):
            await platform.liquidate(3)

    @pytest.mark.asyncio
    async def test_receipt_timeout_is_connectivity(self, platform, contract, connection):
        contract.functions.liquidate.return_value.build_transaction = AsyncMock(return_value={})
        connection.w3.eth.wait_for_transaction_receipt = AsyncMock(side_effect=TimeExhausted("not mined"))

        with pytest.raises(ConnectivityError) as exc_info:
            await platform.liquidate(3)
        assert exc_info.value.error_code == "receipt_timeout"


class TestLendingToken:
    """Token calls used for startup funding"""

    @pytest.mark.asyncio
    async def test_balance_of(self, connection, contract):
        token = LendingTokenAdapter(connection, TOKEN)
        balance_of = returns(contract, "balanceOf", 10 ** 23)

        assert await token.balance_of(BOT.lower()) == 10 ** 23
        balance_of.assert_called_once_with(BOT)

    @pytest.mark.asyncio
    async def test_allowance_and_approve(self, connection, contract):
        token = LendingTokenAdapter(connection, TOKEN)
        returns(contract, "allowance", 5)
        contract.functions.approve.return_value.build_transaction = AsyncMock(return_value={})

        assert await token.allowance(BOT, PLATFORM) == 5
        receipt = await token.approve(PLATFORM, 10 ** 23)

        contract.functions.approve.assert_called_once_with(PLATFORM, 10 ** 23)
        assert receipt.status is TransactionStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_faucet_revert_is_rejected(self, connection, contract):
        token = LendingTokenAdapter(connection, TOKEN)
        contract.functions.faucet.return_value.build_transaction = AsyncMock(
            side_effect=ContractLogicError("execution reverted: Faucet cooldown")
        )

        with pytest.raises(ActionRejectedError):
            await token.faucet()
