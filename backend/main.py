"""
FastAPI entrypoint for the multi-region file gateway.

Routes live in file_gateway.file_router and delegate to file_gateway.services;
this module wires configuration, CORS, error translation and logging.
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from file_gateway import file_router
from file_gateway.backend_clients import StorageClientFactory
from file_gateway.config import ALLOWED_ORIGINS, LOG_LEVEL, load_region_registry
from file_gateway.errors import GatewayError
from file_gateway.registry import RegionRegistry

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(
    registry: Optional[RegionRegistry] = None,
    client_factory: Optional[StorageClientFactory] = None,
) -> FastAPI:
    """
    Build the application.

    Without an explicit registry the region configuration is read from the
    environment at startup; a ConfigurationError there aborts the server
    before it accepts connections.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "registry", None) is None:
            app.state.registry = load_region_registry()
        if getattr(app.state, "client_factory", None) is None:
            app.state.client_factory = StorageClientFactory(app.state.registry)
        yield

    app = FastAPI(title="Multi-Region File Gateway", lifespan=lifespan)
    app.state.registry = registry
    app.state.client_factory = client_factory
    if registry is not None and client_factory is None:
        app.state.client_factory = StorageClientFactory(registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        logger.warning(
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            exc.kind.value,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    app.include_router(file_router.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
