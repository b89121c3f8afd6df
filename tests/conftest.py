"""Pytest configuration and fixtures for token search tests.

Upstreams are faked in memory: ``FakeChain`` answers the JSON-RPC methods
the chain reader uses, ``FakeIndex`` answers the Etherscan tokenlist
action. Both are served through ``httpx.MockTransport``.
"""

import asyncio
import json
from typing import Any

import httpx
import pytest
from eth_abi import encode

from token_search.core.config import SearchConfig
from token_search.providers.chain.erc20_reader import ERC20_SELECTORS

RPC_URL = "https://rpc.test/v2/test-key"
ETHERSCAN_URL = "https://etherscan.test/api"

# Addresses used across tests
TOKEN_A = "0xF574D0c40D3f520360882ee9Eabc718cF6AEA339"
TOKEN_B = "0x" + "b2" * 20
TOKEN_C = "0x" + "c3" * 20
TOKEN_D = "0x" + "d4" * 20
WALLET = "0x" + "e5" * 20

SIGNATURE_BY_SELECTOR = {selector: signature for signature, selector in ERC20_SELECTORS.items()}

REVERT = object()


class FakeChain:
    """In-memory JSON-RPC node with ERC-20 style contracts."""

    def __init__(self):
        self.contracts: dict[str, dict[str, Any]] = {}
        self.delays: dict[str, float] = {}
        self.requests: list[dict[str, Any]] = []
        self.status_code = 200
        self.rpc_errors: dict[str, dict[str, Any]] = {}
        self.in_flight_calls = 0
        self.max_in_flight_calls = 0

    def add_token(
        self,
        address: str,
        name: str,
        symbol: str,
        total_supply: int = 10**24,
        decimals: int = 18,
    ) -> None:
        self.contracts[address.lower()] = {
            "name()": encode(["string"], [name]),
            "symbol()": encode(["string"], [symbol]),
            "totalSupply()": encode(["uint256"], [total_supply]),
            "decimals()": encode(["uint8"], [decimals]),
        }

    def set_response(self, address: str, signature: str, response: Any) -> None:
        """Override one function: raw bytes, or REVERT."""
        self.contracts[address.lower()][signature] = response

    def add_contract(self, address: str) -> None:
        """A contract without any ERC-20 functions."""
        self.contracts[address.lower()] = {}

    def calls_to(self, address: str) -> list[dict[str, Any]]:
        return [
            r for r in self.requests
            if r["method"] == "eth_call" and r["params"][0]["to"] == address.lower()
        ]

    def _reply(self, request_id: int, result: Any = None, error: dict | None = None) -> httpx.Response:
        body: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id}
        if error is not None:
            body["error"] = error
        else:
            body["result"] = result
        return httpx.Response(200, json=body)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        method = payload["method"]
        params = payload["params"]

        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream failure")
        if method in self.rpc_errors:
            return self._reply(payload["id"], error=self.rpc_errors[method])

        if method == "eth_chainId":
            return self._reply(payload["id"], "0xaa36a7")

        if method == "eth_getCode":
            address = params[0]
            return self._reply(payload["id"], "0x6080604052" if address in self.contracts else "0x")

        if method == "eth_call":
            address = params[0]["to"]
            signature = SIGNATURE_BY_SELECTOR[params[0]["data"]]
            self.in_flight_calls += 1
            self.max_in_flight_calls = max(self.max_in_flight_calls, self.in_flight_calls)
            try:
                await asyncio.sleep(self.delays.get(address, 0))
            finally:
                self.in_flight_calls -= 1

            response = self.contracts.get(address, {}).get(signature, REVERT)
            if response is REVERT:
                return self._reply(payload["id"], error={"code": 3, "message": "execution reverted"})
            return self._reply(payload["id"], "0x" + response.hex())

        return self._reply(payload["id"], error={"code": -32601, "message": "method not found"})


class FakeIndex:
    """In-memory Etherscan tokenlist endpoint."""

    def __init__(self):
        self.tokens: list[dict[str, Any]] = []
        self.payload: Any = None
        self.status_code = 200
        self.raw_body: str | None = None
        self.requests: list[httpx.Request] = []

    def add(self, address: str, **extra: Any) -> None:
        self.tokens.append({"contractAddress": address, **extra})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="error")
        if self.raw_body is not None:
            return httpx.Response(200, text=self.raw_body)
        payload = self.payload
        if payload is None:
            payload = {"status": "1", "message": "OK", "result": self.tokens}
        return httpx.Response(200, json=payload)


@pytest.fixture
def fake_chain() -> FakeChain:
    """Empty fake JSON-RPC node."""
    return FakeChain()


@pytest.fixture
def fake_index() -> FakeIndex:
    """Empty fake Etherscan token index."""
    return FakeIndex()


@pytest.fixture
def mock_client(fake_chain: FakeChain, fake_index: FakeIndex) -> httpx.AsyncClient:
    """Async HTTP client routed to the fake upstreams."""

    async def router(request: httpx.Request) -> httpx.Response:
        if request.url.host == "rpc.test":
            return await fake_chain.handle(request)
        if request.url.host == "etherscan.test":
            return fake_index.handle(request)
        raise httpx.ConnectError(f"unknown host {request.url.host}", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(router))


@pytest.fixture
def failing_client() -> httpx.AsyncClient:
    """Async HTTP client whose every request fails to connect."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def search_config() -> SearchConfig:
    """Configuration pointing at the fake upstreams."""
    return SearchConfig(
        rpc_url=RPC_URL,
        etherscan_api_key="test-api-key",
        etherscan_api_url=ETHERSCAN_URL,
        max_concurrency=4,
    )
