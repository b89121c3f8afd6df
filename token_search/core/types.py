"""Type definitions and enums for token search."""

from enum import Enum
from typing import Literal


class DataSource(str, Enum):
    """Upstream provider identifiers."""

    RPC = "rpc"
    ETHERSCAN = "etherscan"
    UNKNOWN = "unknown"


class TokenSource(str, Enum):
    """Provenance tag carried by every resolved token."""

    BLOCKCHAIN = "blockchain"                       # Direct address lookup
    ETHERSCAN_BLOCKCHAIN = "etherscan-blockchain"   # Name match found via the index


class QueryKind(str, Enum):
    """How a raw query is interpreted."""

    ADDRESS = "address"
    NAME = "name"


class LookupStatus(str, Enum):
    """Outcome of a single contract lookup."""

    OK = "ok"
    NOT_FOUND = "not_found"              # No code at the address
    NOT_CONFORMING = "not_conforming"    # Reverted, undecodable or incomplete metadata
    UPSTREAM_ERROR = "upstream_error"    # RPC unreachable or malformed response

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            self.OK: "OK",
            self.NOT_FOUND: "Not a contract",
            self.NOT_CONFORMING: "Not an ERC-20 token",
            self.UPSTREAM_ERROR: "Upstream error",
        }
        return names.get(self, self.value)


# Type aliases for common patterns
Address = str       # 0x-prefixed, 40 hex digits
RawAmount = str     # Unscaled uint256 as a decimal string

OutputFormatType = Literal["json", "table"]
