from fastapi import APIRouter, Depends

from backend.app.api.schemas import IdResponse, NodeUpdateRequest
from backend.app.dependencies import get_mindmap_service
from backend.app.services.mindmap_service import MindMapService

router = APIRouter()


@router.patch("/nodes/{node_id}", response_model=IdResponse)
def update_node(
    node_id: str,
    request: NodeUpdateRequest,
    service: MindMapService = Depends(get_mindmap_service),
):
    return IdResponse(id=service.update_node(node_id, request.to_patch()))


@router.delete("/nodes/{node_id}", response_model=IdResponse)
def delete_node(
    node_id: str,
    service: MindMapService = Depends(get_mindmap_service),
):
    return IdResponse(id=service.delete_node(node_id))


@router.delete("/edges/{edge_id}", response_model=IdResponse)
def delete_edge(
    edge_id: str,
    service: MindMapService = Depends(get_mindmap_service),
):
    return IdResponse(id=service.delete_edge(edge_id))
