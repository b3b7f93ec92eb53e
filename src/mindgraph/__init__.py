"""
mindgraph
=========

Mutation engine for hosted mind maps.

Maintains a tree-like graph of nodes and edges per mind map under
create/update/delete operations, keeps edges consistent with parent
links, imports AI-generated drafts in bulk, and gates AI-triggered
work with a per-user fixed-window rate limiter.

Public API:
- GraphStore
- TreeMutator
- BulkImporter
- GraphQueryFacade
- RateLimiter
"""

from mindgraph.graph.graph_store import GraphStore
from mindgraph.graph.graph_mutator import TreeMutator
from mindgraph.graph.graph_builder import BulkImporter
from mindgraph.graph.graph_query import GraphQueryFacade
from mindgraph.ratelimit.limiter import RateLimiter

__all__ = [
    "GraphStore",
    "TreeMutator",
    "BulkImporter",
    "GraphQueryFacade",
    "RateLimiter",
]

__version__ = "0.1.0"
