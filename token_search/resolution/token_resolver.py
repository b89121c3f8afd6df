"""Token resolution - resolves user input to ERC-20 token descriptors.

A query is either a contract address or a name fragment:
- An address is read directly from the chain (at most one result)
- A name fragment is matched against every token the index knows about,
  reading each candidate from the chain and keeping name/symbol matches
"""

import asyncio
import logging

import httpx

from ..core.config import SearchConfig
from ..core.exceptions import DataSourceError
from ..core.models import LookupResult, SearchResult, TokenDescriptor, is_address
from ..core.types import QueryKind, TokenSource
from ..providers.chain import ERC20Reader
from ..providers.index import EtherscanTokenIndex

logger = logging.getLogger(__name__)


def matches_query(token: TokenDescriptor, query: str) -> bool:
    """Case-insensitive substring match on name or symbol.

    ``TokenResolver.search`` strips surrounding whitespace from the query
    before matching, so ``"usd "`` matches ``"USD Coin"``. Inner whitespace
    is significant.
    """
    needle = query.lower()
    return needle in token.name.lower() or needle in token.symbol.lower()


class TokenResolver:
    """Resolves queries to tokens using a chain reader and a token index."""

    def __init__(
        self,
        config: SearchConfig,
        client: httpx.AsyncClient | None = None,
        chain_reader: ERC20Reader | None = None,
        index_searcher: EtherscanTokenIndex | None = None,
    ):
        """
        Initialize the token resolver.

        Args:
            config: Validated search configuration
            client: Async HTTP client to share between providers. When omitted
                    the resolver creates one and closes it in ``aclose()``.
            chain_reader: Override for the chain reader
            index_searcher: Override for the token index
        """
        config.validate()
        self.max_concurrency = config.max_concurrency

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()

        self.chain_reader = chain_reader or ERC20Reader(config.rpc_url, self.client)
        self.index_searcher = index_searcher or EtherscanTokenIndex(
            config.etherscan_api_url,
            config.etherscan_api_key,
            self.client,
        )

    async def __aenter__(self) -> "TokenResolver":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._owns_client:
            await self.client.aclose()

    @staticmethod
    def classify(query: str) -> QueryKind:
        """Classify a query as an address or a name fragment (no network)."""
        if is_address(query.strip()):
            return QueryKind.ADDRESS
        return QueryKind.NAME

    async def resolve(self, query: str) -> list[TokenDescriptor]:
        """
        Resolve a query to matching tokens. Never raises.

        Args:
            query: Contract address or name/symbol fragment

        Returns:
            Matching tokens; empty when nothing matches or upstreams fail
        """
        result = await self.search(query)
        return result.tokens

    async def search(self, query: str) -> SearchResult:
        """
        Resolve a query and keep per-candidate diagnostics.

        Args:
            query: Contract address or name/symbol fragment

        Returns:
            SearchResult whose ``tokens`` is the public result
        """
        query = query.strip()
        kind = self.classify(query)

        if kind == QueryKind.ADDRESS:
            logger.info(f"Searching by contract address: {query}")
            return await self._search_address(query)

        logger.info(f"Searching by token name: {query!r}")
        return await self._search_name(query)

    async def _search_address(self, address: str) -> SearchResult:
        lookup = await self._lookup(address)
        tokens = []
        if lookup.token is not None:
            tokens.append(lookup.token.with_source(TokenSource.BLOCKCHAIN))
        return SearchResult(
            query=address,
            kind=QueryKind.ADDRESS,
            tokens=tokens,
            lookups=[lookup],
            candidates_count=1,
        )

    async def _search_name(self, name: str) -> SearchResult:
        index_error = None
        try:
            entries = await self.index_searcher.fetch_token_list_or_raise()
        except DataSourceError as e:
            logger.warning(f"Token index error: {e.message}")
            entries = []
            index_error = e.message

        candidates = self._candidate_addresses([entry.contract_address for entry in entries])

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded_lookup(address: str) -> LookupResult:
            async with semaphore:
                return await self._lookup(address)

        # gather returns results in argument order, not completion order
        lookups = await asyncio.gather(*(bounded_lookup(address) for address in candidates))

        tokens = [
            lookup.token.with_source(TokenSource.ETHERSCAN_BLOCKCHAIN)
            for lookup in lookups
            if lookup.token is not None and matches_query(lookup.token, name)
        ]

        if not tokens:
            logger.warning(f"No tokens found matching {name!r}")
        else:
            logger.info(f"Found {len(tokens)} tokens matching {name!r} among {len(candidates)} candidates")

        return SearchResult(
            query=name,
            kind=QueryKind.NAME,
            tokens=tokens,
            lookups=list(lookups),
            candidates_count=len(candidates),
            index_error=index_error,
        )

    def _candidate_addresses(self, addresses: list[str]) -> list[str]:
        """Drop malformed and duplicate addresses, keeping index order."""
        seen: set[str] = set()
        candidates = []
        for address in addresses:
            if not is_address(address):
                logger.debug(f"Ignoring malformed index address: {address!r}")
                continue
            key = address.lower()
            if key in seen:
                continue
            seen.add(key)
            candidates.append(key)
        return candidates

    async def _lookup(self, address: str) -> LookupResult:
        """Run one chain lookup; a failing candidate never aborts the search."""
        try:
            return await self.chain_reader.lookup(address)
        except Exception as e:
            logger.warning(f"Error processing token {address}: {e}")
            return LookupResult.upstream_error(address, str(e) or e.__class__.__name__)
