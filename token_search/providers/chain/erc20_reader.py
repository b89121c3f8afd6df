"""ERC-20 metadata reader.

Reads ``name()``, ``symbol()``, ``totalSupply()`` and ``decimals()`` from
a contract through a JSON-RPC node. A contract only yields a token when
all four calls succeed and return usable values; every failure is
reported as a ``LookupResult`` status instead of an exception.
"""

import asyncio
import itertools
import logging
from typing import Any

import httpx
from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector
from pydantic import ValidationError

from ...core.exceptions import ContractCallError, DataSourceError, RpcError, TokenSearchError
from ...core.models import LookupResult, TokenDescriptor
from ...core.types import DataSource, TokenSource
from ..base import BaseProvider

logger = logging.getLogger(__name__)

# Read-only part of the ERC-20 interface: signature -> ABI return type
ERC20_FUNCTIONS: dict[str, str] = {
    "name()": "string",
    "symbol()": "string",
    "totalSupply()": "uint256",
    "decimals()": "uint8",
}

ERC20_SELECTORS: dict[str, str] = {
    signature: encode_hex(function_signature_to_4byte_selector(signature))
    for signature in ERC20_FUNCTIONS
}

# EIP-1474 code for "execution reverted"
EXECUTION_REVERTED = 3


def format_units(value: int, decimals: int) -> str:
    """
    Scale a raw integer amount by 10^-decimals.

    Uses integer arithmetic only, so arbitrarily large supplies keep every
    digit. The result always has at least one fractional digit and no
    trailing zeros: ``format_units(10**18, 18) == "1.0"``.
    """
    if decimals == 0:
        return f"{value}.0"
    whole, fraction = divmod(value, 10**decimals)
    fraction_digits = str(fraction).zfill(decimals).rstrip("0")
    return f"{whole}.{fraction_digits or '0'}"


def _is_revert(error: RpcError) -> bool:
    return error.code == EXECUTION_REVERTED or "revert" in error.message.lower()


class ERC20Reader(BaseProvider):
    """Fetches ERC-20 token metadata from a JSON-RPC node."""

    SOURCE = DataSource.RPC

    def __init__(self, rpc_url: str, client: httpx.AsyncClient):
        """
        Initialize the reader.

        Args:
            rpc_url: JSON-RPC endpoint URL
            client: Shared async HTTP client
        """
        super().__init__(client)
        self.rpc_url = rpc_url
        self._ids = itertools.count(1)

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        """Issue one JSON-RPC request and return its ``result``."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        data = await self._request_json("POST", self.rpc_url, endpoint=method, json=payload)

        if not isinstance(data, dict):
            raise DataSourceError(source="rpc", message="Malformed JSON-RPC response", endpoint=method)

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RpcError(method, error.get("code"), str(error.get("message", "")))
            raise RpcError(method, None, str(error))

        if "result" not in data:
            raise DataSourceError(source="rpc", message="JSON-RPC response has no result", endpoint=method)
        return data["result"]

    async def get_code(self, address: str) -> str:
        """Return the hex bytecode stored at address (``0x`` for none)."""
        code = await self._rpc("eth_getCode", [address, "latest"])
        if not isinstance(code, str):
            raise DataSourceError(source="rpc", message="eth_getCode returned a non-string", endpoint="eth_getCode")
        return code

    async def call(self, address: str, signature: str) -> Any:
        """
        Call a read-only ERC-20 function and decode its return value.

        Raises:
            ContractCallError: If the call reverts or the data does not decode
            DataSourceError: If the node cannot be reached or answers badly
        """
        params = [{"to": address, "data": ERC20_SELECTORS[signature]}, "latest"]
        try:
            raw = await self._rpc("eth_call", params)
        except RpcError as e:
            if _is_revert(e):
                raise ContractCallError(address, signature, e.message)
            raise

        if not isinstance(raw, str):
            raise DataSourceError(source="rpc", message="eth_call returned a non-string", endpoint="eth_call")

        try:
            data = decode_hex(raw)
        except ValueError:
            raise ContractCallError(address, signature, f"invalid hex in return data: {raw[:20]}")
        if not data:
            raise ContractCallError(address, signature, "empty return data")

        try:
            (value,) = decode([ERC20_FUNCTIONS[signature]], data)
        except (DecodingError, ValueError) as e:
            raise ContractCallError(address, signature, f"cannot decode return data: {e}")
        return value

    async def lookup(self, address: str) -> LookupResult:
        """
        Resolve one address to a tagged lookup result. Never raises.

        Args:
            address: Contract address (0x + 40 hex digits, any case)

        Returns:
            LookupResult with status ok, not_found, not_conforming or upstream_error
        """
        address = address.lower()

        try:
            code = await self.get_code(address)
        except DataSourceError as e:
            logger.warning(f"Could not fetch code at {address}: {e.message}")
            return LookupResult.upstream_error(address, e.message)

        if code in ("", "0x", "0x0"):
            logger.info(f"No contract deployed at {address}")
            return LookupResult.not_found(address, "no contract code at address")

        logger.debug(f"Reading ERC-20 metadata for {address}")
        results = await asyncio.gather(
            *(self.call(address, signature) for signature in ERC20_FUNCTIONS),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
        failures = [r for r in results if isinstance(r, Exception)]

        call_errors = [f for f in failures if isinstance(f, ContractCallError)]
        if failures and len(call_errors) == len(failures):
            logger.warning(f"Contract at {address} may not be an ERC-20 token: {call_errors[0].reason}")
            return LookupResult.not_conforming(address, call_errors[0].message)
        if failures:
            failure = next(f for f in failures if not isinstance(f, ContractCallError))
            if not isinstance(failure, TokenSearchError):
                logger.error(f"Unexpected error reading {address}", exc_info=failure)
            logger.warning(f"Could not read token metadata for {address}: {failure}")
            return LookupResult.upstream_error(address, str(failure))

        name, symbol, total_supply, decimals = results
        if not name or not symbol or not total_supply:
            logger.warning(f"Incomplete token metadata for {address}")
            return LookupResult.not_conforming(address, "incomplete metadata (empty name, symbol or zero supply)")

        try:
            token = TokenDescriptor(
                address=address,
                name=name,
                symbol=symbol,
                total_supply=str(total_supply),
                decimals=decimals,
                total_supply_formatted=format_units(total_supply, decimals),
                source=TokenSource.BLOCKCHAIN,
            )
        except ValidationError as e:
            logger.warning(f"Rejected token metadata for {address}: {e.error_count()} invalid field(s)")
            return LookupResult.not_conforming(address, "invalid metadata")

        return LookupResult.ok(token)

    async def fetch_token(self, address: str) -> TokenDescriptor | None:
        """Return the token at address, or None if it cannot be resolved."""
        result = await self.lookup(address)
        return result.token

    async def is_available(self) -> bool:
        """Check that the node answers ``eth_chainId``."""
        try:
            await self._rpc("eth_chainId", [])
            return True
        except DataSourceError as e:
            logger.warning(f"RPC endpoint unavailable: {e.message}")
            return False
