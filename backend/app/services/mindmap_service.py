from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from mindgraph.config.settings import MindGraphConfig
from mindgraph.errors import NotFoundError, ValidationFailure
from mindgraph.graph.graph_builder import BulkImporter, BulkNodeItem
from mindgraph.graph.graph_mutator import TreeMutator
from mindgraph.graph.graph_query import GraphQueryFacade, MindMapWithData
from mindgraph.graph.graph_schema import MindMap, MindMapExport, MindMapPatch, NodePatch
from mindgraph.graph.graph_store import GraphStore
from mindgraph.ratelimit.limiter import RateLimiter, RateLimitResult, RateLimitStatus
from mindgraph.utils.time import now_ms


class MindMapService:
    """
    Orchestration layer for the mind-map core.

    This is the ONLY place where:
    - config is interpreted
    - rate limits are enforced ahead of AI-triggered writes
    - subsystems are wired
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        config: MindGraphConfig,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.config = config

        self.mutator = TreeMutator(store, clock=clock)
        self.importer = BulkImporter(store, clock=clock)
        self.query = GraphQueryFacade(store, clock=clock)
        self.limiter = RateLimiter.from_config(store, config.rate_limit, clock=clock)

        self._logger = logging.getLogger("mindgraph.service")

    # ---------------- Mind maps ----------------

    def create_mind_map(
        self,
        *,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        main_topic: Optional[str] = None,
        is_public: bool = False,
    ) -> str:
        return self.mutator.create_mind_map(
            user_id=user_id,
            title=title,
            description=description,
            main_topic=main_topic,
            is_public=is_public,
        )

    def list_mind_maps(self, user_id: str) -> List[MindMap]:
        return self.query.list_by_user(user_id)

    def get_mind_map_with_data(self, mind_map_id: str) -> MindMapWithData:
        result = self.query.get_with_data(mind_map_id)
        if result is None:
            raise NotFoundError("MindMap", mind_map_id)
        return result

    def update_mind_map(self, mind_map_id: str, patch: MindMapPatch) -> str:
        return self.mutator.update_mind_map(mind_map_id, patch)

    def delete_mind_map(self, mind_map_id: str) -> str:
        return self.mutator.delete_mind_map(mind_map_id)

    # ---------------- Nodes & edges ----------------

    def create_node(self, **kwargs) -> str:
        return self.mutator.create_node(**kwargs)

    def update_node(self, node_id: str, patch: NodePatch) -> str:
        return self.mutator.update_node(node_id, patch)

    def delete_node(self, node_id: str) -> str:
        return self.mutator.delete_node(node_id)

    def create_bulk_nodes(
        self,
        mind_map_id: str,
        items: Sequence[BulkNodeItem],
    ) -> Dict[str, str]:
        return self.importer.create_bulk(mind_map_id, items)

    def create_edge(self, **kwargs) -> str:
        return self.mutator.create_edge(**kwargs)

    def delete_edge(self, edge_id: str) -> str:
        return self.mutator.delete_edge(edge_id)

    # ---------------- Export & import ----------------

    def export_mind_map(self, mind_map_id: str) -> MindMapExport:
        return self.query.export_mind_map(mind_map_id)

    def import_mind_map(
        self,
        *,
        user_id: str,
        data: MindMapExport,
        new_title: Optional[str] = None,
    ) -> str:
        return self.importer.import_mind_map(user_id, data, new_title)

    # ---------------- AI-triggered writes ----------------

    def import_generated(
        self,
        *,
        user_id: str,
        action: str,
        mind_map_id: str,
        items: Sequence[BulkNodeItem],
    ) -> Dict[str, str]:
        """
        Persist drafts produced by the generation service.

        The request is charged against ``action`` first; a denied request
        raises before any node is written. Charge and import share one
        transaction, so a failed import does not consume budget. Only
        actions listed in the configured policy table are accepted.
        """
        if action not in self.config.rate_limit.policies:
            raise ValidationFailure(f"unknown action: {action}", {"field": "action"})

        with self.store.transaction():
            self.limiter.enforce(user_id, action)
            mapping = self.importer.create_bulk(mind_map_id, items)

        self._logger.info(
            "imported %d generated nodes user=%s action=%s mind_map=%s",
            len(mapping),
            user_id,
            action,
            mind_map_id,
        )
        return mapping

    # ---------------- Rate limits ----------------

    def check_rate_limit(self, user_id: str, action: str) -> RateLimitStatus:
        return self.limiter.check(user_id, action)

    def increment_rate_limit(self, user_id: str, action: str) -> RateLimitResult:
        return self.limiter.increment(user_id, action)
