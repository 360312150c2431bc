import logging
from typing import Dict

from fastapi import APIRouter, Depends, Path, status

from playerduo.core.dependencies import get_current_user, common_pagination_params
from playerduo.core.schemas import ErrorResponse, StandardResponse, PaginatedResponse
from playerduo.models.domain.user import User
from playerduo.moments.dependencies import get_moment_service
from playerduo.schemas.moment import MomentRequest, MomentResponse
from playerduo.services.moment.moment_service import MomentService
from playerduo.utils.response import success_response, paginated_response

router = APIRouter(tags=["Moments"])
logger = logging.getLogger(__name__)

def _page(dtos, total: int, pagination: Dict[str, int]):
    return paginated_response(
        items=[MomentResponse(**dto) for dto in dtos],
        total=total,
        page=pagination["page"],
        page_size=pagination["limit"],
    )

@router.post(
    "/game-player/{game_player_id}",
    response_model=StandardResponse[MomentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="모먼트 작성 (본인 플레이어 프로필)",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "본문/이미지 검증 실패"},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "본인 프로필이 아님"},
    },
)
async def create_moment(
    request: MomentRequest,
    game_player_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    moment_service: MomentService = Depends(get_moment_service),
):
    dto = await moment_service.create_moment(game_player_id, current_user, request.content, request.image_urls)
    return success_response(data=MomentResponse(**dto), message="Moment created")

@router.get("/game-player/{game_player_id}", response_model=PaginatedResponse[MomentResponse], summary="플레이어의 모먼트")
async def get_player_moments(
    game_player_id: int = Path(..., ge=1),
    pagination: Dict[str, int] = Depends(common_pagination_params),
    moment_service: MomentService = Depends(get_moment_service),
):
    dtos, total = await moment_service.get_player_moments(game_player_id, pagination["offset"], pagination["limit"])
    return _page(dtos, total, pagination)

@router.get("/my-moments", response_model=PaginatedResponse[MomentResponse], summary="내 모먼트")
async def get_my_moments(
    pagination: Dict[str, int] = Depends(common_pagination_params),
    current_user: User = Depends(get_current_user),
    moment_service: MomentService = Depends(get_moment_service),
):
    dtos, total = await moment_service.get_my_moments(current_user, pagination["offset"], pagination["limit"])
    return _page(dtos, total, pagination)

@router.get("/feed", response_model=PaginatedResponse[MomentResponse], summary="팔로우한 플레이어 피드")
async def get_feed(
    pagination: Dict[str, int] = Depends(common_pagination_params),
    current_user: User = Depends(get_current_user),
    moment_service: MomentService = Depends(get_moment_service),
):
    dtos, total = await moment_service.get_feed(current_user, pagination["offset"], pagination["limit"])
    return _page(dtos, total, pagination)

@router.get("/all", response_model=PaginatedResponse[MomentResponse], summary="전체 공개 모먼트")
async def get_all_moments(
    pagination: Dict[str, int] = Depends(common_pagination_params),
    moment_service: MomentService = Depends(get_moment_service),
):
    dtos, total = await moment_service.get_all_moments(pagination["offset"], pagination["limit"])
    return _page(dtos, total, pagination)

@router.get("/{moment_id}", response_model=StandardResponse[MomentResponse], summary="모먼트 조회")
async def get_moment(
    moment_id: int = Path(..., ge=1),
    moment_service: MomentService = Depends(get_moment_service),
):
    dto = await moment_service.get_moment(moment_id)
    return success_response(data=MomentResponse(**dto))

@router.put("/{moment_id}", response_model=StandardResponse[MomentResponse], summary="모먼트 수정")
async def update_moment(
    request: MomentRequest,
    moment_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    moment_service: MomentService = Depends(get_moment_service),
):
    dto = await moment_service.update_moment(moment_id, current_user, request.content, request.image_urls)
    return success_response(data=MomentResponse(**dto), message="Moment updated")

@router.delete("/{moment_id}", response_model=StandardResponse[None], summary="모먼트 삭제")
async def delete_moment(
    moment_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    moment_service: MomentService = Depends(get_moment_service),
):
    await moment_service.delete_moment(moment_id, current_user)
    return success_response(message="Moment deleted")

@router.put("/{moment_id}/toggle-visibility", response_model=StandardResponse[MomentResponse], summary="공개/숨김 전환")
async def toggle_visibility(
    moment_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    moment_service: MomentService = Depends(get_moment_service),
):
    dto = await moment_service.toggle_visibility(moment_id, current_user)
    return success_response(data=MomentResponse(**dto))
