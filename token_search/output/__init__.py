"""Output formatting module."""

from .formatters import (
    NO_TOKENS_MESSAGE,
    OutputFormatter,
    JSONFormatter,
    TableFormatter,
    LookupReportFormatter,
)

__all__ = [
    "NO_TOKENS_MESSAGE",
    "OutputFormatter",
    "JSONFormatter",
    "TableFormatter",
    "LookupReportFormatter",
]
