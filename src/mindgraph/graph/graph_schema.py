from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional
from uuid import uuid4

from mindgraph.errors import ValidationFailure


def _new_id() -> str:
    return str(uuid4())


def require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailure(
            f"{field_name} must be a non-empty string",
            {"field": field_name},
        )
    return value


@dataclass(frozen=True)
class MindMap:
    """
    Named container of nodes and edges, owned by exactly one user.
    """

    id: str
    user_id: str
    title: str
    description: Optional[str]
    main_topic: Optional[str]
    is_public: bool
    created_at: int
    updated_at: int

    @staticmethod
    def create(
        *,
        user_id: str,
        title: str,
        now: int,
        description: Optional[str] = None,
        main_topic: Optional[str] = None,
        is_public: bool = False,
    ) -> "MindMap":
        return MindMap(
            id=_new_id(),
            user_id=user_id,
            title=require_text(title, "title"),
            description=description,
            main_topic=main_topic,
            is_public=is_public,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True)
class Node:
    """
    One idea within a mind map.

    ``parent_id`` is null only for roots. ``level`` and ``order`` are
    supplied by the caller and are not re-derived from the parent link.
    """

    id: str
    mind_map_id: str
    parent_id: Optional[str]
    label: str
    content: Optional[str]
    position_x: float
    position_y: float
    color: Optional[str]
    level: int
    order: int
    created_at: int
    updated_at: int

    @staticmethod
    def create(
        *,
        mind_map_id: str,
        label: str,
        position_x: float,
        position_y: float,
        level: int,
        order: int,
        now: int,
        parent_id: Optional[str] = None,
        content: Optional[str] = None,
        color: Optional[str] = None,
    ) -> "Node":
        if level < 0:
            raise ValidationFailure("level must be >= 0", {"field": "level"})
        return Node(
            id=_new_id(),
            mind_map_id=mind_map_id,
            parent_id=parent_id,
            label=require_text(label, "label"),
            content=content,
            position_x=float(position_x),
            position_y=float(position_y),
            color=color,
            level=level,
            order=order,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True)
class Edge:
    """
    Directed link between two nodes of the same mind map.

    Usually mirrors a parent -> child relation, but free-form
    connections are allowed.
    """

    id: str
    mind_map_id: str
    source_id: str
    target_id: str
    label: Optional[str]
    created_at: int

    @staticmethod
    def create(
        *,
        mind_map_id: str,
        source_id: str,
        target_id: str,
        now: int,
        label: Optional[str] = None,
    ) -> "Edge":
        return Edge(
            id=_new_id(),
            mind_map_id=mind_map_id,
            source_id=source_id,
            target_id=target_id,
            label=label,
            created_at=now,
        )


@dataclass(frozen=True)
class RateLimitRecord:
    """
    Fixed-window counter for one (user, action) pair.
    """

    id: str
    user_id: str
    action: str
    window_start: int
    count: int

    @staticmethod
    def create(*, user_id: str, action: str, now: int) -> "RateLimitRecord":
        return RateLimitRecord(
            id=_new_id(),
            user_id=user_id,
            action=action,
            window_start=now,
            count=1,
        )


# ---------------------------------------------------------------------
# Merge patches
# ---------------------------------------------------------------------


class _Patch:
    """
    Partial update where ``None`` means "field absent, leave untouched".
    """

    def changes(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass(frozen=True)
class NodePatch(_Patch):
    label: Optional[str] = None
    content: Optional[str] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    color: Optional[str] = None

    def __post_init__(self) -> None:
        if self.label is not None:
            require_text(self.label, "label")


@dataclass(frozen=True)
class MindMapPatch(_Patch):
    title: Optional[str] = None
    description: Optional[str] = None
    main_topic: Optional[str] = None
    is_public: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.title is not None:
            require_text(self.title, "title")


# ---------------------------------------------------------------------
# Portable export
# ---------------------------------------------------------------------

EXPORT_FORMAT_VERSION = "1.0"


@dataclass(frozen=True)
class ExportedNode:
    """
    Node addressed by a document-scoped ``export_id`` (``node_<i>``).
    """

    export_id: str
    label: str
    position_x: float
    position_y: float
    level: int
    order: int
    parent_export_id: Optional[str] = None
    content: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class ExportedEdge:
    # None when the endpoint is not a node of the exported mind map
    source_export_id: Optional[str]
    target_export_id: Optional[str]
    label: Optional[str] = None


@dataclass(frozen=True)
class MindMapExport:
    """
    Self-contained copy of one mind map, free of store ids.
    """

    title: str
    description: Optional[str]
    main_topic: Optional[str]
    nodes: List[ExportedNode]
    edges: List[ExportedEdge]
    exported_at: int
    version: str = EXPORT_FORMAT_VERSION
