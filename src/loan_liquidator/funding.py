"""
Startup funding of the liquidator identity.

On development networks the bot mints itself borrowed-asset tokens from the
token faucet and approves the lending platform to spend them. Neither step
is required for the bot to run, so failures are reported and skipped.
"""

import logging

from .interfaces import IFungibleAsset
from .types import LiquidatorError
from .utils import format_wei

logger = logging.getLogger(__name__)


async def fund_liquidator(token: IFungibleAsset, owner: str, spender: str, amount: int) -> bool:
    """
    Mint from the faucet and approve `spender` for `amount`.

    Returns True when the allowance is in place afterwards.
    """
    logger.info("Funding liquidator from token faucet")
    try:
        await token.faucet()
    except LiquidatorError as e:
        logger.warning(f"Could not mint from faucet (already funded or faucet empty): {e}")

    try:
        balance = await token.balance_of(owner)
    except LiquidatorError as e:
        logger.warning(f"Could not read token balance of {owner}: {e}")
    else:
        logger.info(f"Liquidator token balance: {format_wei(balance)}",
                    extra={"address": owner, "balance": str(balance)})

    try:
        current = await token.allowance(owner, spender)
        if current >= amount:
            logger.info(f"Allowance of {format_wei(current)} already in place for {spender}")
            return True
        await token.approve(spender, amount)
    except LiquidatorError as e:
        logger.warning(f"Could not approve {spender}, continuing without allowance: {e}")
        return False

    logger.info(f"Approved {spender} for {format_wei(amount)}")
    return True
