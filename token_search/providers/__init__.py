"""Data providers for token search.

This module contains providers for:
- Contract metadata (JSON-RPC node, ERC-20 read interface)
- Candidate discovery (Etherscan token index)
"""

from .base import BaseProvider
from .chain import ERC20Reader, format_units
from .index import EtherscanTokenIndex

__all__ = ["BaseProvider", "ERC20Reader", "format_units", "EtherscanTokenIndex"]
