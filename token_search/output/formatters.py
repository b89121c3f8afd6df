"""Output formatters for token search results.

Provides two output formats:
- JSON: Machine-readable array using the public field names
- Table: Human-readable CLI output
"""

import json
import logging
from abc import ABC, abstractmethod
from io import StringIO

from rich.console import Console
from rich.table import Table

from ..core.models import SearchResult, TokenDescriptor

logger = logging.getLogger(__name__)

NO_TOKENS_MESSAGE = "No tokens found"


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, tokens: list[TokenDescriptor]) -> str:
        """Format the tokens as a string."""
        pass

    def format_to_file(self, tokens: list[TokenDescriptor], filepath: str) -> None:
        """Write formatted tokens to a file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format(tokens))
        logger.debug(f"Wrote {len(tokens)} tokens to {filepath}")


class JSONFormatter(OutputFormatter):
    """Formats tokens as a JSON array."""

    def __init__(self, indent: int | None = 2):
        """
        Initialize JSON formatter.

        Args:
            indent: JSON indentation level (None for compact output)
        """
        self.indent = indent

    def format(self, tokens: list[TokenDescriptor]) -> str:
        """Format tokens as a JSON array string ("[]" when empty)."""
        return json.dumps([token.to_dict() for token in tokens], indent=self.indent)


class TableFormatter(OutputFormatter):
    """Formats tokens as human-readable tables for CLI output."""

    def __init__(self, use_rich: bool = True, width: int = 140):
        """
        Initialize table formatter.

        Args:
            use_rich: Use rich for colored output
            width: Maximum table width
        """
        self.use_rich = use_rich
        self.width = width

    def format(self, tokens: list[TokenDescriptor]) -> str:
        """Format tokens as readable tables."""
        if self.use_rich:
            return self._format_rich(tokens)
        return self._format_plain(tokens)

    def _format_plain(self, tokens: list[TokenDescriptor]) -> str:
        """Plain text formatting without rich."""
        if not tokens:
            return NO_TOKENS_MESSAGE

        lines = []
        sep = "=" * 60
        lines.append(sep)
        lines.append(f"  TOKENS FOUND: {len(tokens)}")
        lines.append(sep)

        for token in tokens:
            lines.append("")
            lines.append(f"{token.name} ({token.symbol})")
            lines.append("-" * 40)
            lines.append(f"  Address:      {token.address}")
            lines.append(f"  Decimals:     {token.decimals}")
            lines.append(f"  Total Supply: {token.total_supply_formatted}")
            lines.append(f"  Raw Supply:   {token.total_supply}")
            lines.append(f"  Source:       {token.source.value}")

        return "\n".join(lines)

    def _format_rich(self, tokens: list[TokenDescriptor]) -> str:
        """Rich library formatting with colors."""
        output = StringIO()
        console = Console(file=output, force_terminal=True, width=self.width)

        if not tokens:
            console.print(f"[yellow]{NO_TOKENS_MESSAGE}[/]")
            return output.getvalue()

        table = Table(title=f"Tokens Found ({len(tokens)})")
        table.add_column("Name", style="bold cyan")
        table.add_column("Symbol", style="cyan")
        table.add_column("Address", style="dim")
        table.add_column("Decimals", justify="right")
        table.add_column("Total Supply", justify="right", style="green")
        table.add_column("Source", style="dim")

        for token in tokens:
            table.add_row(
                token.name,
                token.symbol,
                token.address,
                str(token.decimals),
                token.total_supply_formatted,
                token.source.value,
            )

        console.print(table)
        return output.getvalue()

    def format_to_file(self, tokens: list[TokenDescriptor], filepath: str) -> None:
        """Write formatted output to file."""
        # For file output, use plain format (no ANSI codes)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self._format_plain(tokens))


class LookupReportFormatter:
    """Formats per-candidate lookup outcomes of a search."""

    def format_summary(self, result: SearchResult) -> str:
        """
        Format a summary of how each candidate was resolved.

        Args:
            result: SearchResult with lookup diagnostics

        Returns:
            Formatted string summary
        """
        lines = []
        lines.append("=" * 70)
        lines.append("LOOKUP SUMMARY")
        lines.append("=" * 70)
        lines.append(f"Query: {result.query!r} ({result.kind.value})")
        lines.append(f"Candidates: {result.candidates_count}")
        lines.append(f"Matches: {len(result.tokens)}")

        if result.index_error:
            lines.append(f"Token index: FAILED ({result.index_error})")
        lines.append("")

        counts = result.status_counts
        if counts:
            lines.append("OUTCOMES")
            lines.append("-" * 40)
            for status, count in counts.items():
                lines.append(f"  {status.display_name}: {count}")
            lines.append("")

        problems = [lookup for lookup in result.lookups if not lookup.found]
        if problems:
            lines.append("UNRESOLVED ADDRESSES")
            lines.append("-" * 40)
            for lookup in problems:
                lines.append(f"  {lookup.address}  [{lookup.status.value}] {lookup.detail or ''}".rstrip())
            lines.append("")

        return "\n".join(lines)
