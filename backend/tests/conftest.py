from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_mindmap_service
from backend.app.services.mindmap_service import MindMapService

from mindgraph.config.settings import MindGraphConfig, RateLimitConfig, RateLimitPolicy
from mindgraph.graph.graph_builder import BulkImporter
from mindgraph.graph.graph_mutator import TreeMutator
from mindgraph.graph.graph_query import GraphQueryFacade
from mindgraph.graph.graph_store import GraphStore
from mindgraph.ratelimit.limiter import RateLimiter


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


TEST_POLICIES = {
    "ai:generateMindMap": RateLimitPolicy(max_requests=3, window_ms=60_000),
    "ai:expandNode": RateLimitPolicy(max_requests=1, window_ms=1_000),
}


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> GraphStore:
    return GraphStore()


@pytest.fixture()
def mutator(store: GraphStore, clock: FakeClock) -> TreeMutator:
    return TreeMutator(store, clock=clock)


@pytest.fixture()
def importer(store: GraphStore, clock: FakeClock) -> BulkImporter:
    return BulkImporter(store, clock=clock)


@pytest.fixture()
def facade(store: GraphStore, clock: FakeClock) -> GraphQueryFacade:
    return GraphQueryFacade(store, clock=clock)


@pytest.fixture()
def limiter(store: GraphStore, clock: FakeClock) -> RateLimiter:
    return RateLimiter(store, TEST_POLICIES, clock=clock)


@pytest.fixture()
def mind_map_id(mutator: TreeMutator) -> str:
    return mutator.create_mind_map(user_id="user-1", title="Ideas")


@pytest.fixture()
def service(store: GraphStore, clock: FakeClock) -> MindMapService:
    return MindMapService(
        store=store,
        config=MindGraphConfig(rate_limit=RateLimitConfig(policies=TEST_POLICIES)),
        clock=clock,
    )


@pytest.fixture()
def client(service: MindMapService):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    app.dependency_overrides[get_mindmap_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
