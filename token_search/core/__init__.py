"""Core module - data models, types, configuration and exceptions."""

from .models import (
    TokenDescriptor,
    LookupResult,
    IndexEntry,
    SearchResult,
    is_address,
)
from .types import (
    DataSource,
    TokenSource,
    QueryKind,
    LookupStatus,
)
from .exceptions import (
    TokenSearchError,
    DataSourceError,
    RateLimitError,
    RpcError,
    ContractCallError,
    ConfigurationError,
)
from .config import SearchConfig, get_config, reload_config

__all__ = [
    # Models
    "TokenDescriptor",
    "LookupResult",
    "IndexEntry",
    "SearchResult",
    "is_address",
    # Types
    "DataSource",
    "TokenSource",
    "QueryKind",
    "LookupStatus",
    # Exceptions
    "TokenSearchError",
    "DataSourceError",
    "RateLimitError",
    "RpcError",
    "ContractCallError",
    "ConfigurationError",
    # Config
    "SearchConfig",
    "get_config",
    "reload_config",
]
