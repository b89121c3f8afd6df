"""Custom exceptions for token search."""


class TokenSearchError(Exception):
    """Base exception for all token search errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DataSourceError(TokenSearchError):
    """Raised when a data source fails or returns invalid data."""

    def __init__(
        self,
        source: str,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        full_message = f"[{source}] {message}"
        super().__init__(
            full_message,
            {
                "source": source,
                "endpoint": endpoint,
                "status_code": status_code,
            },
        )
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code


class RateLimitError(DataSourceError):
    """Raised when API rate limit is hit."""

    def __init__(
        self,
        source: str,
        retry_after_seconds: int | None = None,
        endpoint: str | None = None,
    ):
        message = "Rate limit exceeded"
        if retry_after_seconds:
            message += f", retry after {retry_after_seconds}s"
        super().__init__(source, message, endpoint=endpoint, status_code=429)
        self.retry_after_seconds = retry_after_seconds


class RpcError(DataSourceError):
    """Raised when a JSON-RPC node answers with an error object."""

    def __init__(self, method: str, code: int | None, message: str):
        super().__init__("rpc", f"{method} failed ({code}): {message}", endpoint=method)
        self.method = method
        self.code = code


class ContractCallError(TokenSearchError):
    """Raised when a contract call reverts or returns undecodable data."""

    def __init__(self, address: str, function: str, reason: str):
        message = f"Call {function} on {address} failed: {reason}"
        super().__init__(message, {"address": address, "function": function, "reason": reason})
        self.address = address
        self.function = function
        self.reason = reason


class ConfigurationError(TokenSearchError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, message: str):
        full_message = f"Configuration error [{config_key}]: {message}"
        super().__init__(full_message, {"config_key": config_key})
        self.config_key = config_key
