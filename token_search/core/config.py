"""Configuration management for endpoints and API keys.

Loads configuration from environment variables or a .env file. There are
no built-in credentials: a deployment without an RPC URL or an Etherscan
API key is rejected by ``validate()``.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

DEFAULT_ETHERSCAN_API_URL = "https://api-sepolia.etherscan.io/api"
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected an integer, got {raw!r}")


@dataclass
class SearchConfig:
    """Settings for the chain reader, the token index and the HTTP service."""

    # JSON-RPC endpoint of the node (e.g. an Alchemy Sepolia URL)
    rpc_url: Optional[str] = None

    # Etherscan token index
    etherscan_api_key: Optional[str] = None
    etherscan_api_url: str = DEFAULT_ETHERSCAN_API_URL

    # Maximum number of candidate lookups in flight during a name search
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    # HTTP service
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Load configuration from environment variables."""
        return cls(
            rpc_url=os.getenv("RPC_URL") or os.getenv("ALCHEMY_SEPOLIA"),
            etherscan_api_key=os.getenv("ETHERSCAN_API_KEY"),
            etherscan_api_url=os.getenv("ETHERSCAN_API_URL") or DEFAULT_ETHERSCAN_API_URL,
            max_concurrency=_int_from_env("SEARCH_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY),
            host=os.getenv("HOST") or DEFAULT_HOST,
            port=_int_from_env("PORT", DEFAULT_PORT),
        )

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "SearchConfig":
        """
        Load configuration from .env file and environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                      looks for .env in the current working directory.

        Returns:
            SearchConfig instance with loaded values
        """
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path.cwd() / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        return cls.from_env()

    def validate(self) -> "SearchConfig":
        """
        Reject incomplete configuration.

        Raises:
            ConfigurationError: If a required setting is missing or invalid
        """
        if not self.rpc_url:
            raise ConfigurationError("RPC_URL", "JSON-RPC endpoint URL is not set")
        if not self.etherscan_api_key:
            raise ConfigurationError("ETHERSCAN_API_KEY", "Etherscan API key is not set")
        if self.max_concurrency < 1:
            raise ConfigurationError(
                "SEARCH_MAX_CONCURRENCY", f"must be at least 1, got {self.max_concurrency}"
            )
        return self


# Global config instance (lazy loaded)
_config: Optional[SearchConfig] = None


def get_config() -> SearchConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = SearchConfig.load()
    return _config


def reload_config(env_file: Optional[Path] = None) -> SearchConfig:
    """Reload configuration from environment."""
    global _config
    _config = SearchConfig.load(env_file)
    return _config
