"""Base classes for data providers."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..core.exceptions import DataSourceError, RateLimitError
from ..core.types import DataSource

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Abstract base class for all data providers.

    Providers share one ``httpx.AsyncClient`` owned by their caller and
    translate transport failures into ``DataSourceError``.
    """

    # Subclasses must define their data source
    SOURCE: DataSource = DataSource.UNKNOWN

    def __init__(self, client: httpx.AsyncClient):
        """
        Initialize provider.

        Args:
            client: Shared async HTTP client
        """
        self.client = client

    async def _request_json(
        self,
        method: str,
        url: str,
        endpoint: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """
        Send an HTTP request and decode the JSON body.

        Args:
            method: HTTP method
            url: Full request URL
            endpoint: Short label used in errors and logs
            **kwargs: Passed to ``httpx.AsyncClient.request``

        Raises:
            RateLimitError: On HTTP 429
            DataSourceError: On transport errors, other HTTP errors or a non-JSON body
        """
        source = self.SOURCE.value
        start_time = time.time()

        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise DataSourceError(
                source=source,
                message=str(e) or e.__class__.__name__,
                endpoint=endpoint,
            )

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"[{source}] {endpoint} -> HTTP {response.status_code} in {duration_ms}ms")

        if response.status_code == 429:
            raise RateLimitError(source=source, endpoint=endpoint)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DataSourceError(
                source=source,
                message=f"HTTP {e.response.status_code}",
                endpoint=endpoint,
                status_code=e.response.status_code,
            )

        try:
            return response.json()
        except (ValueError, RecursionError):
            raise DataSourceError(
                source=source,
                message="Response body is not valid JSON",
                endpoint=endpoint,
                status_code=response.status_code,
            )

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the provider is reachable and answering."""
        pass
