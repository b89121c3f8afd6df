"""On-chain contract metadata providers."""

from .erc20_reader import ERC20Reader, format_units

__all__ = ["ERC20Reader", "format_units"]
