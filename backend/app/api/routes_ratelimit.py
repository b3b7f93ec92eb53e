import math

from fastapi import APIRouter, Depends

from backend.app.api.schemas import RateLimitIncrementResponse, RateLimitStatusResponse
from backend.app.dependencies import get_mindmap_service, get_user_id
from backend.app.services.mindmap_service import MindMapService

router = APIRouter()


@router.get("/{action}", response_model=RateLimitStatusResponse)
def check_rate_limit(
    action: str,
    user_id: str = Depends(get_user_id),
    service: MindMapService = Depends(get_mindmap_service),
):
    result = service.check_rate_limit(user_id, action)
    return RateLimitStatusResponse(
        allowed=result.allowed,
        remaining=None if math.isinf(result.remaining) else int(result.remaining),
        reset_at=result.reset_at,
    )


@router.post("/{action}", response_model=RateLimitIncrementResponse)
def increment_rate_limit(
    action: str,
    user_id: str = Depends(get_user_id),
    service: MindMapService = Depends(get_mindmap_service),
):
    result = service.increment_rate_limit(user_id, action)
    return RateLimitIncrementResponse(
        success=result.success,
        error=result.error,
        reset_at=result.reset_at,
    )
