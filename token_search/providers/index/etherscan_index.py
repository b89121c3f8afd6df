"""Etherscan token index.

Fetches the list of token contracts tracked by Etherscan for one network.
The tokenlist action has no name filter, so the full list is returned and
filtering happens on the client.
"""

import logging
from typing import Any

import httpx

from ...core.exceptions import DataSourceError, RateLimitError
from ...core.models import IndexEntry
from ...core.types import DataSource
from ..base import BaseProvider

logger = logging.getLogger(__name__)


class EtherscanTokenIndex(BaseProvider):
    """Lists token contracts known to an Etherscan-compatible API."""

    SOURCE = DataSource.ETHERSCAN

    def __init__(self, api_url: str, api_key: str, client: httpx.AsyncClient):
        """
        Initialize the index client.

        Args:
            api_url: Etherscan API base URL (network specific)
            api_key: Etherscan API key
            client: Shared async HTTP client
        """
        super().__init__(client)
        self.api_url = api_url
        self.api_key = api_key

    def _parse_entries(self, data: Any) -> list[IndexEntry]:
        """Validate the tokenlist payload and extract the entries."""
        if not isinstance(data, dict):
            raise DataSourceError(source="etherscan", message="Response is not a JSON object", endpoint="tokenlist")

        result = data.get("result")
        if isinstance(result, str):
            # Etherscan reports errors as {"status": "0", "message": "NOTOK", "result": "<reason>"}
            if "rate limit" in result.lower():
                raise RateLimitError(source="etherscan", endpoint="tokenlist")
            raise DataSourceError(source="etherscan", message=result, endpoint="tokenlist")
        if result is None:
            return []
        if not isinstance(result, list):
            raise DataSourceError(source="etherscan", message="'result' is not a list", endpoint="tokenlist")

        entries = []
        skipped = 0
        for item in result:
            if isinstance(item, dict) and isinstance(item.get("contractAddress"), str):
                entries.append(IndexEntry.model_validate(item))
            else:
                skipped += 1
        if skipped:
            logger.debug(f"Skipped {skipped} index entries without a contractAddress")
        return entries

    async def fetch_token_list_or_raise(self) -> list[IndexEntry]:
        """
        Fetch every token contract tracked by the index.

        Returns:
            Index entries in the order the index returned them

        Raises:
            DataSourceError: If the request fails or the payload is malformed
        """
        params = {
            "module": "token",
            "action": "tokenlist",
            "apikey": self.api_key,
        }
        data = await self._request_json("GET", self.api_url, endpoint="tokenlist", params=params)
        entries = self._parse_entries(data)
        logger.info(f"Token index returned {len(entries)} tokens")
        return entries

    async def fetch_token_list(self) -> list[IndexEntry]:
        """Fetch the token list, degrading to an empty list on any failure."""
        try:
            return await self.fetch_token_list_or_raise()
        except DataSourceError as e:
            logger.warning(f"Token index unavailable: {e.message}")
            return []

    async def is_available(self) -> bool:
        """Check that the index endpoint answers a tokenlist request."""
        try:
            await self.fetch_token_list_or_raise()
            return True
        except DataSourceError as e:
            logger.warning(f"Token index unavailable: {e.message}")
            return False
