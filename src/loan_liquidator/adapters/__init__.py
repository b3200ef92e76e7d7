"""
Contract adapter implementations.
"""

from .base import BaseContractAdapter
from .platform import LendingPlatformAdapter
from .token import LendingTokenAdapter

__all__ = [
    "BaseContractAdapter",
    "LendingPlatformAdapter",
    "LendingTokenAdapter",
]
