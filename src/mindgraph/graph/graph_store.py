from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import networkx as nx

from mindgraph.errors import NotFoundError
from mindgraph.graph.graph_schema import Edge, MindMap, Node, RateLimitRecord

logger = logging.getLogger("mindgraph.store")

# Ordered set: insertion-ordered dict keys give stable iteration order.
_Index = Dict[str, Dict[str, None]]


def _index_add(index: _Index, key: Optional[str], value: str) -> None:
    if key is None:
        return
    index.setdefault(key, {})[value] = None


def _index_discard(index: _Index, key: Optional[str], value: str) -> None:
    if key is None:
        return
    bucket = index.get(key)
    if bucket is None:
        return
    bucket.pop(value, None)
    if not bucket:
        del index[key]


def _index_move(index: _Index, old: Optional[str], new: Optional[str], value: str) -> None:
    if old == new:
        return
    _index_discard(index, old, value)
    _index_add(index, new, value)


class GraphStore:
    """
    Authoritative in-memory store for mind maps, nodes, edges and
    rate-limit windows.

    Nodes and edges live in a ``networkx.MultiDiGraph`` keyed by edge id,
    so free-form parallel edges are allowed. An edge may point at a node id
    that was never inserted; such endpoints exist in the graph only as
    payload-less placeholders and are never returned as nodes.

    Multi-row writes must run inside :meth:`transaction`, which serializes
    writers and journals the prior value of every row it touches so the
    block can be undone when it raises.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._mind_maps: Dict[str, MindMap] = {}
        self._rate_limits: Dict[Tuple[str, str], RateLimitRecord] = {}

        self._mind_maps_by_user: _Index = {}
        self._nodes_by_mind_map: _Index = {}
        self._nodes_by_parent: _Index = {}
        self._edges_by_mind_map: _Index = {}
        self._edge_endpoints: Dict[str, Tuple[str, str]] = {}

        self.metadata: Dict[str, Any] = {}

        self._lock = threading.RLock()
        self._journal: Optional[List[Callable[[], None]]] = None

    # -------------------- Transactions --------------------

    @contextmanager
    def transaction(self) -> Iterator["GraphStore"]:
        """
        Run a block of writes atomically.

        Nested transactions join the outermost one; only the outermost
        owns the undo journal and rolls back.
        """
        with self._lock:
            if self._journal is not None:
                yield self
                return

            self._journal = []
            try:
                yield self
            except BaseException as exc:
                undo = self._journal
                self._journal = None
                for step in reversed(undo):
                    step()
                logger.warning(
                    "transaction rolled back (%d writes undone): %s",
                    len(undo),
                    exc,
                )
                raise
            finally:
                self._journal = None

    @contextmanager
    def locked(self) -> Iterator["GraphStore"]:
        """
        Hold the store lock for a consistent multi-index read.
        """
        with self._lock:
            yield self

    def _record(self, undo: Callable[[], None]) -> None:
        if self._journal is not None:
            self._journal.append(undo)

    # -------------------- Mind maps --------------------

    def insert_mind_map(self, mind_map: MindMap) -> str:
        self._record(lambda: self._pop_mind_map(mind_map.id))
        self._put_mind_map(mind_map)
        return mind_map.id

    def get_mind_map(self, mind_map_id: str) -> Optional[MindMap]:
        return self._mind_maps.get(mind_map_id)

    def mind_maps_by_user(self, user_id: str) -> List[MindMap]:
        ids = reversed(list(self._mind_maps_by_user.get(user_id, {})))
        return sorted(
            (self._mind_maps[i] for i in ids),
            key=lambda m: m.created_at,
            reverse=True,
        )

    def patch_mind_map(self, mind_map_id: str, **fields: Any) -> MindMap:
        current = self._mind_maps.get(mind_map_id)
        if current is None:
            raise NotFoundError("MindMap", mind_map_id)
        updated = replace(current, **fields)
        self._record(lambda: self._put_mind_map(current))
        self._put_mind_map(updated)
        return updated

    def delete_mind_map(self, mind_map_id: str) -> None:
        current = self._mind_maps.get(mind_map_id)
        if current is None:
            raise NotFoundError("MindMap", mind_map_id)
        self._record(lambda: self._put_mind_map(current))
        self._pop_mind_map(mind_map_id)

    def _put_mind_map(self, mind_map: MindMap) -> None:
        previous = self._mind_maps.get(mind_map.id)
        self._mind_maps[mind_map.id] = mind_map
        _index_move(
            self._mind_maps_by_user,
            previous.user_id if previous else None,
            mind_map.user_id,
            mind_map.id,
        )

    def _pop_mind_map(self, mind_map_id: str) -> None:
        current = self._mind_maps.pop(mind_map_id)
        _index_discard(self._mind_maps_by_user, current.user_id, mind_map_id)

    # -------------------- Nodes --------------------

    def insert_node(self, node: Node) -> str:
        self._record(lambda: self._pop_node(node.id))
        self._put_node(node)
        return node.id

    def get_node(self, node_id: str) -> Optional[Node]:
        if node_id not in self._graph:
            return None
        return self._graph.nodes[node_id].get("data")

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    def get_nodes(self) -> List[Node]:
        return [
            data["data"]
            for _, data in self._graph.nodes(data=True)
            if "data" in data
        ]

    def nodes_by_mind_map(self, mind_map_id: str) -> List[Node]:
        return [
            self._graph.nodes[i]["data"]
            for i in self._nodes_by_mind_map.get(mind_map_id, {})
        ]

    def nodes_by_parent(self, parent_id: str) -> List[Node]:
        return [
            self._graph.nodes[i]["data"]
            for i in self._nodes_by_parent.get(parent_id, {})
        ]

    def patch_node(self, node_id: str, **fields: Any) -> Node:
        current = self.get_node(node_id)
        if current is None:
            raise NotFoundError("Node", node_id)
        updated = replace(current, **fields)
        self._record(lambda: self._put_node(current))
        self._put_node(updated)
        return updated

    def delete_node(self, node_id: str) -> None:
        current = self.get_node(node_id)
        if current is None:
            raise NotFoundError("Node", node_id)
        self._record(lambda: self._put_node(current))
        self._pop_node(node_id)

    def _put_node(self, node: Node) -> None:
        previous = self.get_node(node.id)
        self._graph.add_node(node.id, data=node)
        _index_move(
            self._nodes_by_mind_map,
            previous.mind_map_id if previous else None,
            node.mind_map_id,
            node.id,
        )
        _index_move(
            self._nodes_by_parent,
            previous.parent_id if previous else None,
            node.parent_id,
            node.id,
        )

    def _pop_node(self, node_id: str) -> None:
        current = self._graph.nodes[node_id].pop("data")
        _index_discard(self._nodes_by_mind_map, current.mind_map_id, node_id)
        _index_discard(self._nodes_by_parent, current.parent_id, node_id)
        # Edges still touching the id keep it alive as a placeholder.
        self._drop_placeholder(node_id)

    # -------------------- Edges --------------------

    def insert_edge(self, edge: Edge) -> str:
        self._record(lambda: self._pop_edge(edge.id))
        self._put_edge(edge)
        return edge.id

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        endpoints = self._edge_endpoints.get(edge_id)
        if endpoints is None:
            return None
        source, target = endpoints
        return self._graph.edges[source, target, edge_id]["data"]

    def get_edges(self) -> List[Edge]:
        return [data["data"] for _, _, data in self._graph.edges(data=True)]

    def edges_by_mind_map(self, mind_map_id: str) -> List[Edge]:
        return [
            self.get_edge(i)
            for i in self._edges_by_mind_map.get(mind_map_id, {})
        ]

    def edges_by_source(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return [
            data["data"]
            for _, _, data in self._graph.out_edges(node_id, data=True)
        ]

    def edges_by_target(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return [
            data["data"]
            for _, _, data in self._graph.in_edges(node_id, data=True)
        ]

    def delete_edge(self, edge_id: str) -> bool:
        """
        Remove an edge. Missing ids are a no-op and return ``False``.
        """
        current = self.get_edge(edge_id)
        if current is None:
            return False
        self._record(lambda: self._put_edge(current))
        self._pop_edge(edge_id)
        return True

    def _put_edge(self, edge: Edge) -> None:
        self._graph.add_edge(edge.source_id, edge.target_id, key=edge.id, data=edge)
        self._edge_endpoints[edge.id] = (edge.source_id, edge.target_id)
        _index_add(self._edges_by_mind_map, edge.mind_map_id, edge.id)

    def _pop_edge(self, edge_id: str) -> None:
        source, target = self._edge_endpoints.pop(edge_id)
        edge = self._graph.edges[source, target, edge_id]["data"]
        self._graph.remove_edge(source, target, key=edge_id)
        _index_discard(self._edges_by_mind_map, edge.mind_map_id, edge_id)
        self._drop_placeholder(source)
        self._drop_placeholder(target)

    def _drop_placeholder(self, node_id: str) -> None:
        if node_id not in self._graph:
            return
        if "data" in self._graph.nodes[node_id]:
            return
        if self._graph.degree(node_id) == 0:
            self._graph.remove_node(node_id)

    # -------------------- Rate limits --------------------

    def get_rate_limit(self, user_id: str, action: str) -> Optional[RateLimitRecord]:
        return self._rate_limits.get((user_id, action))

    def insert_rate_limit(self, record: RateLimitRecord) -> str:
        key = (record.user_id, record.action)
        previous = self._rate_limits.get(key)
        self._record(lambda: self._put_rate_limit(key, previous))
        self._put_rate_limit(key, record)
        return record.id

    def patch_rate_limit(self, user_id: str, action: str, **fields: Any) -> RateLimitRecord:
        key = (user_id, action)
        current = self._rate_limits.get(key)
        if current is None:
            raise NotFoundError("RateLimitRecord", f"{user_id}:{action}")
        updated = replace(current, **fields)
        self._record(lambda: self._put_rate_limit(key, current))
        self._put_rate_limit(key, updated)
        return updated

    def _put_rate_limit(
        self,
        key: Tuple[str, str],
        record: Optional[RateLimitRecord],
    ) -> None:
        if record is None:
            self._rate_limits.pop(key, None)
        else:
            self._rate_limits[key] = record

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return len(self.get_nodes())

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def mind_map_count(self) -> int:
        return len(self._mind_maps)
