"""
Graph subsystem for mindgraph.

Defines the mind-map graph abstractions used for:
- indexed storage of mind maps, nodes and edges
- single-node create/update/splice-delete
- bulk import with temporary-id resolution
- aggregated reads
- portable export and re-import
"""

from mindgraph.graph.graph_schema import (
    MindMap,
    Node,
    Edge,
    RateLimitRecord,
    NodePatch,
    MindMapPatch,
    ExportedNode,
    ExportedEdge,
    MindMapExport,
)
from mindgraph.graph.graph_store import GraphStore
from mindgraph.graph.graph_builder import BulkImporter, BulkNodeItem
from mindgraph.graph.graph_query import GraphQueryFacade, MindMapWithData
from mindgraph.graph.graph_mutator import TreeMutator

__all__ = [
    "MindMap",
    "Node",
    "Edge",
    "RateLimitRecord",
    "NodePatch",
    "MindMapPatch",
    "ExportedNode",
    "ExportedEdge",
    "MindMapExport",
    "GraphStore",
    "BulkImporter",
    "BulkNodeItem",
    "GraphQueryFacade",
    "MindMapWithData",
    "TreeMutator",
]
