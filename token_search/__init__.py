"""Token Search.

Resolves a contract address or a free-text name fragment into ERC-20
token descriptors by reading contract metadata from a JSON-RPC node and
cross-referencing an Etherscan token index.
"""

__version__ = "0.1.0"
