from functools import lru_cache
import logging

from fastapi import HTTPException, Request, status

from mindgraph.graph.graph_store import GraphStore

from backend.app.config import AppConfig
from backend.app.services.mindmap_service import MindMapService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_store() -> GraphStore:
    store = GraphStore()
    store.metadata["source"] = "backend"
    logging.getLogger("mindgraph.startup").info("[startup] graph store ready")
    return store


@lru_cache
def get_mindmap_service() -> MindMapService:
    config = get_config()

    service = MindMapService(
        store=get_store(),
        config=config.mindgraph,
    )
    logging.getLogger("mindgraph.startup").info(
        "[startup] rate limiting enabled=%s actions=%s",
        config.mindgraph.rate_limit.enabled,
        sorted(config.mindgraph.rate_limit.policies),
    )
    return service


def get_user_id(request: Request) -> str:
    """
    Caller identity as asserted by the upstream identity provider.
    """
    header = get_config().user_id_header
    user_id = request.headers.get(header)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {header} header",
        )
    return user_id
