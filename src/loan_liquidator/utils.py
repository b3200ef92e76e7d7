"""
Utility functions for addresses, keys and wei formatting.
"""

import re
from typing import Union
from decimal import Decimal
from eth_utils import to_checksum_address, is_address, from_wei


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def validate_address(address: str) -> bool:
    """Validate EVM address format"""
    return isinstance(address, str) and is_address(address)


def normalize_address(address: str) -> str:
    """Normalize address to checksum format"""
    return to_checksum_address(address)


def is_zero_address(address: str) -> bool:
    return int(address, 16) == 0


def validate_private_key(private_key: str) -> bool:
    """Validate private key format"""
    # Remove 0x prefix if present
    if private_key.startswith('0x'):
        private_key = private_key[2:]

    # Check if it's 64 hex characters
    return bool(re.match(r'^[0-9a-fA-F]{64}$', private_key))


def format_wei(wei_value: Union[int, str], unit: str = "ether") -> Decimal:
    """Convert wei to larger unit"""
    return Decimal(str(from_wei(int(wei_value), unit)))
