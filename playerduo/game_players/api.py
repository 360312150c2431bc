"""
게임 플레이어(동행자) API
프로필 등록/수정/삭제, 관리자 요약, 팔로우
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from playerduo.core.dependencies import get_current_user, get_optional_user, require_admin
from playerduo.core.schemas import ErrorResponse, StandardResponse
from playerduo.game_players.dependencies import get_game_player_service
from playerduo.models.domain.user import User
from playerduo.schemas.game import GamePlayerCreate, GamePlayerUpdate, GamePlayerResponse, GamePlayerSummary
from playerduo.schemas.moment import FollowStatusResponse
from playerduo.services.game.game_player_service import GamePlayerService, game_player_dto
from playerduo.utils.response import success_response

router = APIRouter(tags=["Game Players"])
logger = logging.getLogger(__name__)

@router.get("", response_model=StandardResponse[List[GamePlayerResponse]], summary="게임 플레이어 목록")
async def list_game_players(
    game_id: Optional[int] = Query(None, ge=1, description="게임 ID로 필터"),
    service: GamePlayerService = Depends(get_game_player_service),
):
    game_players = await service.list_game_players(game_id)
    return success_response(data=[GamePlayerResponse(**game_player_dto(gp)) for gp in game_players])

@router.get("/summary", response_model=StandardResponse[List[GamePlayerSummary]], summary="플레이어 요약 (관리자)")
async def get_summaries(
    _: User = Depends(require_admin),
    service: GamePlayerService = Depends(get_game_player_service),
):
    summaries = await service.get_summaries()
    return success_response(data=[GamePlayerSummary(**s) for s in summaries])

@router.get("/user/{user_id}", response_model=StandardResponse[List[GamePlayerResponse]], summary="사용자의 플레이어 프로필")
async def get_user_game_players(
    user_id: int = Path(..., ge=1),
    service: GamePlayerService = Depends(get_game_player_service),
):
    game_players = await service.get_user_game_players(user_id)
    return success_response(data=[GamePlayerResponse(**game_player_dto(gp)) for gp in game_players])

@router.post(
    "",
    response_model=StandardResponse[GamePlayerResponse],
    status_code=status.HTTP_201_CREATED,
    summary="플레이어 프로필 등록 (PLAYER 역할 부여)",
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "이미 해당 게임에 등록됨"}},
)
async def register_game_player(
    request: GamePlayerCreate,
    current_user: User = Depends(get_current_user),
    service: GamePlayerService = Depends(get_game_player_service),
):
    game_player = await service.register(current_user, request.model_dump())
    return success_response(data=GamePlayerResponse(**game_player_dto(game_player)), message="Game player registered")

@router.get("/{game_player_id}", response_model=StandardResponse[GamePlayerResponse], summary="플레이어 프로필 조회")
async def get_game_player(
    game_player_id: int = Path(..., ge=1),
    service: GamePlayerService = Depends(get_game_player_service),
):
    game_player = await service.get_game_player(game_player_id)
    return success_response(data=GamePlayerResponse(**game_player_dto(game_player)))

@router.put("/{game_player_id}", response_model=StandardResponse[GamePlayerResponse], summary="플레이어 프로필 수정 (본인)")
async def update_game_player(
    request: GamePlayerUpdate,
    game_player_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    service: GamePlayerService = Depends(get_game_player_service),
):
    game_player = await service.update(current_user, game_player_id, request.model_dump(exclude_unset=True))
    return success_response(data=GamePlayerResponse(**game_player_dto(game_player)), message="Game player updated")

@router.delete("/{game_player_id}", response_model=StandardResponse[None], summary="플레이어 프로필 삭제")
async def delete_game_player(
    game_player_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    service: GamePlayerService = Depends(get_game_player_service),
):
    await service.delete(current_user, game_player_id)
    return success_response(message="Game player deleted")

# --- 팔로우 ---

@router.post("/{game_player_id}/follow", response_model=StandardResponse[FollowStatusResponse], summary="팔로우")
async def follow(
    game_player_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    service: GamePlayerService = Depends(get_game_player_service),
):
    await service.follow(current_user, game_player_id)
    result = await service.follow_status(current_user, game_player_id)
    return success_response(data=FollowStatusResponse(**result), message="Followed")

@router.delete("/{game_player_id}/follow", response_model=StandardResponse[FollowStatusResponse], summary="언팔로우")
async def unfollow(
    game_player_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    service: GamePlayerService = Depends(get_game_player_service),
):
    await service.unfollow(current_user, game_player_id)
    result = await service.follow_status(current_user, game_player_id)
    return success_response(data=FollowStatusResponse(**result), message="Unfollowed")

@router.get("/{game_player_id}/follow-status", response_model=StandardResponse[FollowStatusResponse], summary="팔로우 상태")
async def follow_status(
    game_player_id: int = Path(..., ge=1),
    current_user: Optional[User] = Depends(get_optional_user),
    service: GamePlayerService = Depends(get_game_player_service),
):
    result = await service.follow_status(current_user, game_player_id)
    return success_response(data=FollowStatusResponse(**result))
