"""HTTP service exposing token search.

Run with: token-search serve
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .core.config import SearchConfig, get_config
from .resolution import TokenResolver

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[SearchConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Search configuration (defaults to the environment)
        client: Optional HTTP client shared by the upstream providers

    Raises:
        ConfigurationError: If the configuration is incomplete
    """
    config = (config or get_config()).validate()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the resolver on startup and release it on shutdown."""
        logger.info("Starting token search service")
        app.state.resolver = TokenResolver(config, client=client)
        yield
        logger.info("Shutting down token search service")
        await app.state.resolver.aclose()

    app = FastAPI(
        title="Token Search",
        description="Resolve ERC-20 tokens by contract address or name",
        version=__version__,
        lifespan=lifespan,
    )

    # The search front-end is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/search")
    async def search(request: Request, query: Optional[str] = Query(None)):
        """Search tokens by contract address or name fragment."""
        if query is None or not query.strip():
            return JSONResponse(status_code=400, content={"error": "Missing query parameter"})

        resolver: TokenResolver = request.app.state.resolver
        tokens = await resolver.resolve(query)
        return JSONResponse(content=[token.to_dict() for token in tokens])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    return app
