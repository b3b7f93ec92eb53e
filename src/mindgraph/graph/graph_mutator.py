from __future__ import annotations

import logging
from typing import Callable, Optional

from mindgraph.errors import NotFoundError
from mindgraph.graph.graph_schema import (
    Edge,
    MindMap,
    MindMapPatch,
    Node,
    NodePatch,
)
from mindgraph.graph.graph_store import GraphStore
from mindgraph.utils.time import now_ms

logger = logging.getLogger("mindgraph.mutation")


class TreeMutator:
    """
    Single-entity structural writes over a mind map.

    Every public operation runs as one store transaction. Parent links
    are trusted as given: a ``parent_id`` that does not resolve is stored
    as-is, producing a dangling companion edge rather than an error.
    """

    def __init__(
        self,
        store: GraphStore,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.clock = clock

    # ------------------------------------------------------------------
    # Mind maps
    # ------------------------------------------------------------------

    def create_mind_map(
        self,
        *,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        main_topic: Optional[str] = None,
        is_public: bool = False,
    ) -> str:
        mind_map = MindMap.create(
            user_id=user_id,
            title=title,
            now=self.clock(),
            description=description,
            main_topic=main_topic,
            is_public=is_public,
        )
        with self.store.transaction() as store:
            store.insert_mind_map(mind_map)

        logger.info("created mind map %s for user %s", mind_map.id, user_id)
        return mind_map.id

    def update_mind_map(self, mind_map_id: str, patch: MindMapPatch) -> str:
        with self.store.transaction() as store:
            store.patch_mind_map(
                mind_map_id,
                **patch.changes(),
                updated_at=self.clock(),
            )
        return mind_map_id

    def delete_mind_map(self, mind_map_id: str) -> str:
        """
        Full cascade: every node and edge of the mind map goes with it.
        """
        with self.store.transaction() as store:
            if store.get_mind_map(mind_map_id) is None:
                raise NotFoundError("MindMap", mind_map_id)

            edges = store.edges_by_mind_map(mind_map_id)
            for edge in edges:
                store.delete_edge(edge.id)

            nodes = store.nodes_by_mind_map(mind_map_id)
            for node in nodes:
                store.delete_node(node.id)

            store.delete_mind_map(mind_map_id)

        logger.info(
            "deleted mind map %s (%d nodes, %d edges)",
            mind_map_id,
            len(nodes),
            len(edges),
        )
        return mind_map_id

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def create_node(
        self,
        *,
        mind_map_id: str,
        label: str,
        position_x: float,
        position_y: float,
        level: int,
        order: int,
        parent_id: Optional[str] = None,
        content: Optional[str] = None,
        color: Optional[str] = None,
    ) -> str:
        now = self.clock()
        node = Node.create(
            mind_map_id=mind_map_id,
            parent_id=parent_id,
            label=label,
            content=content,
            position_x=position_x,
            position_y=position_y,
            color=color,
            level=level,
            order=order,
            now=now,
        )

        with self.store.transaction() as store:
            store.insert_node(node)

            if parent_id is not None:
                store.insert_edge(
                    Edge.create(
                        mind_map_id=mind_map_id,
                        source_id=parent_id,
                        target_id=node.id,
                        now=now,
                    )
                )

            self._touch(mind_map_id, now)

        logger.info("created node %s in mind map %s", node.id, mind_map_id)
        return node.id

    def update_node(self, node_id: str, patch: NodePatch) -> str:
        """
        Merge-patch: only fields present on ``patch`` change, but
        ``updated_at`` is refreshed on every call.
        """
        with self.store.transaction() as store:
            store.patch_node(node_id, **patch.changes(), updated_at=self.clock())
        return node_id

    def delete_node(self, node_id: str) -> str:
        """
        Splice the node out of its tree.

        Direct children are re-parented to the deleted node's parent (or
        become roots). No replacement edges are created for them, so the
        edge set and the parent links may diverge afterwards.
        """
        with self.store.transaction() as store:
            node = store.get_node(node_id)
            if node is None:
                raise NotFoundError("Node", node_id)

            children = store.nodes_by_parent(node_id)
            for child in children:
                store.patch_node(child.id, parent_id=node.parent_id)

            for edge in store.edges_by_source(node_id):
                store.delete_edge(edge.id)

            for edge in store.edges_by_target(node_id):
                store.delete_edge(edge.id)

            store.delete_node(node_id)

            if store.get_mind_map(node.mind_map_id) is not None:
                self._touch(node.mind_map_id, self.clock())

        logger.info(
            "deleted node %s, re-parented %d children to %s",
            node_id,
            len(children),
            node.parent_id,
        )
        return node_id

    # ------------------------------------------------------------------
    # Free-form edges
    # ------------------------------------------------------------------

    def create_edge(
        self,
        *,
        mind_map_id: str,
        source_id: str,
        target_id: str,
        label: Optional[str] = None,
    ) -> str:
        edge = Edge.create(
            mind_map_id=mind_map_id,
            source_id=source_id,
            target_id=target_id,
            label=label,
            now=self.clock(),
        )
        with self.store.transaction() as store:
            # endpoints are not checked, the owning mind map is
            if store.get_mind_map(mind_map_id) is None:
                raise NotFoundError("MindMap", mind_map_id)
            store.insert_edge(edge)
        return edge.id

    def delete_edge(self, edge_id: str) -> str:
        with self.store.transaction() as store:
            if not store.delete_edge(edge_id):
                raise NotFoundError("Edge", edge_id)
        return edge_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _touch(self, mind_map_id: str, now: int) -> None:
        current = self.store.get_mind_map(mind_map_id)
        if current is None:
            raise NotFoundError("MindMap", mind_map_id)
        # updated_at never moves backwards
        self.store.patch_mind_map(
            mind_map_id,
            updated_at=max(current.updated_at, now),
        )
