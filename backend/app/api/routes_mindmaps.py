from fastapi import APIRouter, Depends, status

from backend.app.api.schemas import (
    BulkCreateRequest,
    BulkCreateResponse,
    EdgeCreateRequest,
    EdgeOut,
    GeneratedImportRequest,
    IdResponse,
    MindMapCreateRequest,
    MindMapExportDocument,
    MindMapImportRequest,
    MindMapOut,
    MindMapUpdateRequest,
    MindMapWithDataResponse,
    NodeCreateRequest,
    NodeOut,
)
from backend.app.dependencies import get_mindmap_service, get_user_id
from backend.app.services.mindmap_service import MindMapService

router = APIRouter()


@router.post("/", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
def create_mind_map(
    request: MindMapCreateRequest,
    user_id: str = Depends(get_user_id),
    service: MindMapService = Depends(get_mindmap_service),
):
    mind_map_id = service.create_mind_map(
        user_id=user_id,
        title=request.title,
        description=request.description,
        main_topic=request.main_topic,
        is_public=request.is_public,
    )
    return IdResponse(id=mind_map_id)


@router.post("/import", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
def import_mind_map(
    request: MindMapImportRequest,
    user_id: str = Depends(get_user_id),
    service: MindMapService = Depends(get_mindmap_service),
):
    mind_map_id = service.import_mind_map(
        user_id=user_id,
        data=request.data.to_export(),
        new_title=request.new_title,
    )
    return IdResponse(id=mind_map_id)


@router.get("/", response_model=list[MindMapOut])
def list_mind_maps(
    user_id: str = Depends(get_user_id),
    service: MindMapService = Depends(get_mindmap_service),
):
    return [MindMapOut.model_validate(m) for m in service.list_mind_maps(user_id)]


@router.get("/{mind_map_id}", response_model=MindMapWithDataResponse)
def get_mind_map_with_data(
    mind_map_id: str,
    service: MindMapService = Depends(get_mindmap_service),
):
    data = service.get_mind_map_with_data(mind_map_id)
    return MindMapWithDataResponse(
        mind_map=MindMapOut.model_validate(data.mind_map),
        nodes=[NodeOut.model_validate(n) for n in data.nodes],
        edges=[EdgeOut.model_validate(e) for e in data.edges],
    )


@router.get("/{mind_map_id}/export", response_model=MindMapExportDocument)
def export_mind_map(
    mind_map_id: str,
    service: MindMapService = Depends(get_mindmap_service),
):
    return MindMapExportDocument.from_export(service.export_mind_map(mind_map_id))


@router.patch("/{mind_map_id}", response_model=IdResponse)
def update_mind_map(
    mind_map_id: str,
    request: MindMapUpdateRequest,
    service: MindMapService = Depends(get_mindmap_service),
):
    return IdResponse(id=service.update_mind_map(mind_map_id, request.to_patch()))


@router.delete("/{mind_map_id}", response_model=IdResponse)
def delete_mind_map(
    mind_map_id: str,
    service: MindMapService = Depends(get_mindmap_service),
):
    return IdResponse(id=service.delete_mind_map(mind_map_id))


@router.post(
    "/{mind_map_id}/nodes",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_node(
    mind_map_id: str,
    request: NodeCreateRequest,
    service: MindMapService = Depends(get_mindmap_service),
):
    node_id = service.create_node(mind_map_id=mind_map_id, **request.model_dump())
    return IdResponse(id=node_id)


@router.post(
    "/{mind_map_id}/nodes/bulk",
    response_model=BulkCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_bulk_nodes(
    mind_map_id: str,
    request: BulkCreateRequest,
    service: MindMapService = Depends(get_mindmap_service),
):
    mapping = service.create_bulk_nodes(
        mind_map_id,
        [n.to_item() for n in request.nodes],
    )
    return BulkCreateResponse(id_map=mapping)


@router.post(
    "/{mind_map_id}/generated",
    response_model=BulkCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def import_generated(
    mind_map_id: str,
    request: GeneratedImportRequest,
    user_id: str = Depends(get_user_id),
    service: MindMapService = Depends(get_mindmap_service),
):
    mapping = service.import_generated(
        user_id=user_id,
        action=request.action,
        mind_map_id=mind_map_id,
        items=[n.to_item() for n in request.nodes],
    )
    return BulkCreateResponse(id_map=mapping)


@router.post(
    "/{mind_map_id}/edges",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_edge(
    mind_map_id: str,
    request: EdgeCreateRequest,
    service: MindMapService = Depends(get_mindmap_service),
):
    edge_id = service.create_edge(mind_map_id=mind_map_id, **request.model_dump())
    return IdResponse(id=edge_id)
