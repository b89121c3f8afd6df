"""Token index providers used for candidate discovery."""

from .etherscan_index import EtherscanTokenIndex

__all__ = ["EtherscanTokenIndex"]
