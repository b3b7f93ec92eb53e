from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from mindgraph.graph.graph_builder import BulkNodeItem
from mindgraph.graph.graph_schema import (
    ExportedEdge,
    ExportedNode,
    MindMapExport,
    MindMapPatch,
    NodePatch,
)


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------- Mind maps ----------------


class MindMapCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    main_topic: Optional[str] = None
    is_public: bool = False


class MindMapUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    main_topic: Optional[str] = None
    is_public: Optional[bool] = None

    def to_patch(self) -> MindMapPatch:
        return MindMapPatch(**self.model_dump(exclude_unset=True))


class MindMapOut(_Record):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    main_topic: Optional[str]
    is_public: bool
    created_at: int
    updated_at: int


# ---------------- Nodes ----------------


class NodeCreateRequest(BaseModel):
    label: str = Field(min_length=1)
    position_x: float
    position_y: float
    level: int = Field(ge=0)
    order: int
    parent_id: Optional[str] = None
    content: Optional[str] = None
    color: Optional[str] = None


class NodeUpdateRequest(BaseModel):
    label: Optional[str] = None
    content: Optional[str] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    color: Optional[str] = None

    def to_patch(self) -> NodePatch:
        return NodePatch(**self.model_dump(exclude_unset=True))


class NodeOut(_Record):
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


class BulkNodeIn(BaseModel):
    temp_id: str
    parent_temp_id: Optional[str] = None
    label: str
    content: Optional[str] = None
    position_x: float
    position_y: float
    color: Optional[str] = None
    level: int
    order: int

    def to_item(self) -> BulkNodeItem:
        return BulkNodeItem(**self.model_dump())


class BulkCreateRequest(BaseModel):
    nodes: List[BulkNodeIn]


class GeneratedImportRequest(BaseModel):
    action: str
    nodes: List[BulkNodeIn]


class BulkCreateResponse(BaseModel):
    id_map: Dict[str, str]


# ---------------- Edges ----------------


class EdgeCreateRequest(BaseModel):
    source_id: str
    target_id: str
    label: Optional[str] = None


class EdgeOut(_Record):
    id: str
    mind_map_id: str
    source_id: str
    target_id: str
    label: Optional[str]
    created_at: int


# ---------------- Aggregates ----------------


class IdResponse(BaseModel):
    id: str


class MindMapWithDataResponse(BaseModel):
    mind_map: MindMapOut
    nodes: List[NodeOut]
    edges: List[EdgeOut]


# ---------------- Export & import ----------------


class ExportedNodeModel(_Record):
    export_id: str
    parent_export_id: Optional[str] = None
    label: str
    content: Optional[str] = None
    position_x: float
    position_y: float
    color: Optional[str] = None
    level: int
    order: int


class ExportedEdgeModel(_Record):
    source_export_id: Optional[str] = None
    target_export_id: Optional[str] = None
    label: Optional[str] = None


class ExportedMindMapInfo(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    main_topic: Optional[str] = None


class MindMapExportDocument(BaseModel):
    version: str
    exported_at: int
    mind_map: ExportedMindMapInfo
    nodes: List[ExportedNodeModel]
    edges: List[ExportedEdgeModel]

    @classmethod
    def from_export(cls, export: MindMapExport) -> "MindMapExportDocument":
        return cls(
            version=export.version,
            exported_at=export.exported_at,
            mind_map=ExportedMindMapInfo(
                title=export.title,
                description=export.description,
                main_topic=export.main_topic,
            ),
            nodes=[ExportedNodeModel.model_validate(n) for n in export.nodes],
            edges=[ExportedEdgeModel.model_validate(e) for e in export.edges],
        )

    def to_export(self) -> MindMapExport:
        return MindMapExport(
            title=self.mind_map.title,
            description=self.mind_map.description,
            main_topic=self.mind_map.main_topic,
            nodes=[ExportedNode(**n.model_dump()) for n in self.nodes],
            edges=[ExportedEdge(**e.model_dump()) for e in self.edges],
            exported_at=self.exported_at,
            version=self.version,
        )


class MindMapImportRequest(BaseModel):
    data: MindMapExportDocument
    new_title: Optional[str] = None


# ---------------- Rate limits ----------------


class RateLimitStatusResponse(BaseModel):
    allowed: bool
    # None when the action has no policy
    remaining: Optional[int]
    reset_at: int


class RateLimitIncrementResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    reset_at: Optional[int] = None
