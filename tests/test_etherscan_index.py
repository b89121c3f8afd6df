"""Tests for the Etherscan token index."""

import pytest

from token_search.core.exceptions import DataSourceError, RateLimitError
from token_search.providers.index import EtherscanTokenIndex

from conftest import ETHERSCAN_URL, TOKEN_A, TOKEN_B, TOKEN_C


@pytest.fixture
def index(mock_client) -> EtherscanTokenIndex:
    return EtherscanTokenIndex(ETHERSCAN_URL, "test-api-key", mock_client)


class TestEtherscanTokenIndex:
    """Tests for fetching the tracked token list."""

    @pytest.mark.asyncio
    async def test_fetch_token_list_preserves_order(self, fake_index, index):
        fake_index.add(TOKEN_C, tokenName="Token C")
        fake_index.add(TOKEN_A, tokenName="Token A")
        fake_index.add(TOKEN_B)

        entries = await index.fetch_token_list()

        assert [e.contract_address for e in entries] == [TOKEN_C, TOKEN_A, TOKEN_B]

    @pytest.mark.asyncio
    async def test_request_parameters(self, fake_index, index):
        """The full list is requested; the query is never sent to the index."""
        await index.fetch_token_list()

        params = fake_index.requests[0].url.params
        assert params["module"] == "token"
        assert params["action"] == "tokenlist"
        assert params["apikey"] == "test-api-key"
        assert set(params.keys()) == {"module", "action", "apikey"}

    @pytest.mark.asyncio
    async def test_entries_without_address_are_skipped(self, fake_index, index):
        fake_index.add(TOKEN_A)
        fake_index.tokens.append({"tokenName": "no address"})
        fake_index.tokens.append({"contractAddress": None})
        fake_index.tokens.append("garbage")

        entries = await index.fetch_token_list()

        assert [e.contract_address for e in entries] == [TOKEN_A]

    @pytest.mark.asyncio
    async def test_empty_result(self, fake_index, index):
        fake_index.payload = {"status": "0", "message": "No tokens found", "result": []}

        assert await index.fetch_token_list() == []

    @pytest.mark.asyncio
    async def test_error_message_result(self, fake_index, index):
        """Etherscan reports failures as a string result."""
        fake_index.payload = {"status": "0", "message": "NOTOK", "result": "Invalid API Key"}

        assert await index.fetch_token_list() == []
        with pytest.raises(DataSourceError, match="Invalid API Key"):
            await index.fetch_token_list_or_raise()

    @pytest.mark.asyncio
    async def test_rate_limit_message(self, fake_index, index):
        fake_index.payload = {"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}

        with pytest.raises(RateLimitError):
            await index.fetch_token_list_or_raise()

    @pytest.mark.asyncio
    async def test_http_429(self, fake_index, index):
        fake_index.status_code = 429

        assert await index.fetch_token_list() == []
        with pytest.raises(RateLimitError):
            await index.fetch_token_list_or_raise()

    @pytest.mark.asyncio
    async def test_http_500(self, fake_index, index):
        fake_index.status_code = 500

        with pytest.raises(DataSourceError) as exc_info:
            await index.fetch_token_list_or_raise()
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_malformed_json(self, fake_index, index):
        fake_index.raw_body = "<html>not json</html>"

        assert await index.fetch_token_list() == []

    @pytest.mark.asyncio
    async def test_deeply_nested_json(self, fake_index, index):
        """A body nested past the decoder's recursion limit is malformed, not a crash."""
        fake_index.raw_body = "[" * 200000

        assert await index.fetch_token_list() == []
        with pytest.raises(DataSourceError, match="not valid JSON"):
            await index.fetch_token_list_or_raise()
        assert await index.is_available() is False

    @pytest.mark.asyncio
    async def test_result_not_a_list(self, fake_index, index):
        fake_index.payload = {"status": "1", "result": {"contractAddress": TOKEN_A}}

        assert await index.fetch_token_list() == []

    @pytest.mark.asyncio
    async def test_connection_error(self, failing_client):
        index = EtherscanTokenIndex(ETHERSCAN_URL, "test-api-key", failing_client)

        assert await index.fetch_token_list() == []
        assert await index.is_available() is False

    @pytest.mark.asyncio
    async def test_is_available(self, index):
        assert await index.is_available() is True
