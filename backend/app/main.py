import logging

from fastapi import FastAPI
from contextlib import asynccontextmanager

from backend.app.config import AppConfig
from backend.app.api.error_handlers import register_error_handlers
from backend.app.api.routes_mindmaps import router as mindmaps_router
from backend.app.api.routes_nodes import router as nodes_router
from backend.app.api.routes_ratelimit import router as ratelimit_router
from backend.app.dependencies import get_mindmap_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Builds the store and service once at startup.
    """
    get_mindmap_service()

    yield


def create_app(config: AppConfig) -> FastAPI:
    logging.getLogger("mindgraph").setLevel(config.log_level)

    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    register_error_handlers(app)

    app.include_router(
        mindmaps_router,
        prefix=f"{config.api_prefix}/mindmaps",
        tags=["mindmaps"],
    )

    app.include_router(
        nodes_router,
        prefix=config.api_prefix,
        tags=["nodes"],
    )

    app.include_router(
        ratelimit_router,
        prefix=f"{config.api_prefix}/ratelimit",
        tags=["ratelimit"],
    )

    return app


config = AppConfig()
app = create_app(config)
