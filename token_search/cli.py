"""CLI entry point for Token Search.

Usage:
    token-search search 0xF574D0c40D3f520360882ee9Eabc718cF6AEA339
    token-search search "Token B" --output json --save results/token_b.json
    token-search serve --port 3000
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .core.config import SearchConfig, reload_config
from .core.exceptions import ConfigurationError
from .output.formatters import JSONFormatter, LookupReportFormatter, TableFormatter
from .resolution import TokenResolver

# Initialize app
app = typer.Typer(
    name="token-search",
    help="Resolve ERC-20 tokens by contract address or name",
    add_completion=False,
)

console = Console()
# Logs and diagnostics go to stderr so stdout stays parseable with --output json
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def load_config(env_file: Optional[Path]) -> SearchConfig:
    """Load and validate configuration, exiting on error."""
    try:
        return reload_config(env_file).validate()
    except ConfigurationError as e:
        err_console.print(f"[red]{escape(e.message)}[/]")
        raise typer.Exit(1)


@app.command()
def search(
    query: str = typer.Argument(..., help="Contract address or token name/symbol fragment"),
    output: str = typer.Option(
        "table",
        "--output", "-o",
        help="Output format: table, json",
    ),
    save: Optional[Path] = typer.Option(
        None,
        "--save", "-s",
        help="Save output to this file (written as given, in the --output format)",
    ),
    details: bool = typer.Option(
        False,
        "--details", "-d",
        help="Show how every candidate address was resolved (printed to stderr)",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Path to a .env file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Search tokens by contract address or name.

    Examples:
        token-search search 0xF574D0c40D3f520360882ee9Eabc718cF6AEA339
        token-search search "Token B" --output json
    """
    setup_logging(verbose)

    if not query.strip():
        err_console.print("[red]Query must not be empty[/]")
        raise typer.Exit(1)

    output_lower = output.lower()
    if output_lower not in ("table", "json"):
        err_console.print(f"[red]Invalid output format: {output}. Use table or json[/]")
        raise typer.Exit(1)

    config = load_config(env_file)

    async def run():
        async with TokenResolver(config) as resolver:
            return await resolver.search(query)

    result = asyncio.run(run())

    if output_lower == "json":
        formatter = JSONFormatter()
        print(formatter.format(result.tokens))
    else:
        formatter = TableFormatter()
        console.print(formatter.format(result.tokens), soft_wrap=True, markup=False, highlight=False)

    if details:
        err_console.print(LookupReportFormatter().format_summary(result), markup=False, highlight=False)

    if save:
        save.parent.mkdir(parents=True, exist_ok=True)
        formatter.format_to_file(result.tokens, str(save))
        err_console.print(f"[green]Saved to {escape(str(save))}[/]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: HOST or 0.0.0.0)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: PORT or 3000)"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Path to a .env file"),
) -> None:
    """Run the HTTP search service."""
    import uvicorn

    from .api import create_app

    config = load_config(env_file)
    web_app = create_app(config)
    uvicorn.run(web_app, host=host or config.host, port=port or config.port)


@app.command()
def check(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Path to a .env file"),
) -> None:
    """Check that the RPC endpoint and the token index are reachable."""
    setup_logging(False)
    config = load_config(env_file)

    async def run():
        async with TokenResolver(config) as resolver:
            return (
                await resolver.chain_reader.is_available(),
                await resolver.index_searcher.is_available(),
            )

    rpc_ok, index_ok = asyncio.run(run())
    for label, ok in (("RPC endpoint", rpc_ok), ("Token index", index_ok)):
        status = "[green]OK[/]" if ok else "[red]UNAVAILABLE[/]"
        console.print(f"  {label}: {status}")

    if not (rpc_ok and index_ok):
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"Token Search v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
