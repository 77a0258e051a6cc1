"""
Registry age filter server.

This module builds the Starlette application that sits in front of the
upstream registry: package metadata requests go through the age filter,
everything else is proxied unchanged.
"""

from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .clients.registry_client import RegistryClient, filter_headers
from .config import Config, load_config
from .exceptions import RegistryError
from .logging import configure_logging, get_logger
from .middleware import AgeFilterMiddleware
from .transport import HttpConfig

logger = get_logger(__name__)

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def _raw_path(request: Request) -> str:
    """Path as sent by the client, keeping encodings such as @scope%2Fname."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.url.path


def create_app(config: Config, registry: RegistryClient | None = None) -> Starlette:
    """
    Create the filtering proxy application.

    Args:
        config: Configuration instance
        registry: Registry client, or None to create one from ``config``

    Returns:
        Starlette application
    """
    registry = registry or RegistryClient(config)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        await registry.aclose()

    async def health(request: Request) -> JSONResponse:
        upstream = await registry.check_health()
        status = "healthy" if upstream["status"] == "healthy" else "degraded"
        return JSONResponse(
            {
                "status": status,
                "max_age_days": config.max_age_days,
                "dependencies": {"registry": upstream},
            }
        )

    async def proxy(request: Request) -> Response:
        try:
            upstream = await registry.forward(
                request.method,
                _raw_path(request),
                query=request.url.query,
                headers=request.headers,
                content=await request.body(),
            )
        except RegistryError as e:
            return JSONResponse(
                status_code=502,
                content={"error": "Bad Gateway", "message": e.message},
            )

        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers=filter_headers(upstream.headers),
        )

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/{path:path}", proxy, methods=PROXY_METHODS),
        ],
        lifespan=lifespan,
    )
    app.add_middleware(
        AgeFilterMiddleware,
        source=registry,
        policy=config.policy(),
        bypass_paths=["/health"],
    )
    app.state.config = config
    app.state.registry = registry
    return app


def main(transport_config=None, config: Config | None = None):
    """
    Run the filtering proxy.

    Args:
        transport_config: HTTP transport configuration (None = defaults)
        config: Configuration instance (None = load from environment)
    """
    config = config or load_config()
    configure_logging(config)
    transport_config = transport_config or HttpConfig()

    logger.info("Starting registry age filter", config=config.model_dump(mode="json"))
    logger.info(f"Listening on {transport_config.host}:{transport_config.port}")

    uvicorn.run(
        create_app(config),
        host=transport_config.host,
        port=transport_config.port,
        log_level=config.log_level.lower(),
    )
