from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from mindgraph.errors import NotFoundError
from mindgraph.graph.graph_schema import (
    Edge,
    ExportedEdge,
    ExportedNode,
    MindMap,
    MindMapExport,
    Node,
)
from mindgraph.graph.graph_store import GraphStore
from mindgraph.utils.time import now_ms


@dataclass(frozen=True)
class MindMapWithData:
    """
    A mind map together with every node and edge it owns.
    """

    mind_map: MindMap
    nodes: List[Node]
    edges: List[Edge]


class GraphQueryFacade:
    """
    Read-side aggregation over the store.

    Each call reads under the store lock, so it never observes a
    partially applied write.
    """

    def __init__(
        self,
        store: GraphStore,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.clock = clock

    def get_with_data(self, mind_map_id: str) -> Optional[MindMapWithData]:
        with self.store.locked() as store:
            mind_map = store.get_mind_map(mind_map_id)
            if mind_map is None:
                return None

            return MindMapWithData(
                mind_map=mind_map,
                nodes=store.nodes_by_mind_map(mind_map_id),
                edges=store.edges_by_mind_map(mind_map_id),
            )

    def get_mind_map(self, mind_map_id: str) -> Optional[MindMap]:
        with self.store.locked() as store:
            return store.get_mind_map(mind_map_id)

    def list_by_user(self, user_id: str) -> List[MindMap]:
        """Newest first."""
        with self.store.locked() as store:
            return store.mind_maps_by_user(user_id)

    def nodes_for(self, mind_map_id: str) -> List[Node]:
        with self.store.locked() as store:
            return store.nodes_by_mind_map(mind_map_id)

    def edges_for(self, mind_map_id: str) -> List[Edge]:
        with self.store.locked() as store:
            return store.edges_by_mind_map(mind_map_id)

    def export_mind_map(self, mind_map_id: str) -> MindMapExport:
        """
        Snapshot a mind map into a portable document.

        Store ids are replaced by ``node_<i>`` in node order. Parent links
        and edge endpoints that do not resolve to a node of this mind map
        are exported as ``None``.
        """
        data = self.get_with_data(mind_map_id)
        if data is None:
            raise NotFoundError("MindMap", mind_map_id)

        export_ids: Dict[str, str] = {
            node.id: f"node_{index}" for index, node in enumerate(data.nodes)
        }

        nodes = [
            ExportedNode(
                export_id=export_ids[node.id],
                parent_export_id=export_ids.get(node.parent_id) if node.parent_id else None,
                label=node.label,
                content=node.content,
                position_x=node.position_x,
                position_y=node.position_y,
                color=node.color,
                level=node.level,
                order=node.order,
            )
            for node in data.nodes
        ]
        edges = [
            ExportedEdge(
                source_export_id=export_ids.get(edge.source_id),
                target_export_id=export_ids.get(edge.target_id),
                label=edge.label,
            )
            for edge in data.edges
        ]

        return MindMapExport(
            title=data.mind_map.title,
            description=data.mind_map.description,
            main_topic=data.mind_map.main_topic,
            nodes=nodes,
            edges=edges,
            exported_at=self.clock(),
        )
