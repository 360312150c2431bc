import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status

from playerduo.core.dependencies import require_admin
from playerduo.core.schemas import ErrorResponse, StandardResponse
from playerduo.games.dependencies import get_game_service
from playerduo.models.domain.game import Game
from playerduo.models.domain.user import User
from playerduo.schemas.game import GameCreate, GameUpdate, GameResponse
from playerduo.services.game.game_service import GameService
from playerduo.utils.response import success_response

router = APIRouter(tags=["Games"])
logger = logging.getLogger(__name__)

def _game_dto(game: Game, player_count: int = 0) -> GameResponse:
    return GameResponse.model_validate(game).model_copy(update={"player_count": player_count})

@router.get("", response_model=StandardResponse[List[GameResponse]], summary="게임 목록 (등록 플레이어 수 포함)")
async def list_games(game_service: GameService = Depends(get_game_service)):
    games = await game_service.list_games()
    return success_response(data=[_game_dto(item["game"], item["player_count"]) for item in games])

@router.get("/{game_id}", response_model=StandardResponse[GameResponse], summary="게임 조회")
async def get_game(game_id: int = Path(..., ge=1), game_service: GameService = Depends(get_game_service)):
    game = await game_service.get_game(game_id)
    return success_response(data=_game_dto(game))

@router.post(
    "",
    response_model=StandardResponse[GameResponse],
    status_code=status.HTTP_201_CREATED,
    summary="게임 등록 (관리자)",
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "중복된 게임 이름"}},
)
async def create_game(
    request: GameCreate,
    _: User = Depends(require_admin),
    game_service: GameService = Depends(get_game_service),
):
    game = await game_service.create_game(request.model_dump())
    return success_response(data=_game_dto(game), message="Game created")

@router.put("/{game_id}", response_model=StandardResponse[GameResponse], summary="게임 수정 (관리자)")
async def update_game(
    request: GameUpdate,
    game_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    game_service: GameService = Depends(get_game_service),
):
    game = await game_service.update_game(game_id, request.model_dump())
    return success_response(data=_game_dto(game), message="Game updated")

@router.delete(
    "/{game_id}",
    response_model=StandardResponse[None],
    summary="게임 삭제 (관리자)",
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "등록된 플레이어가 있음"}},
)
async def delete_game(
    game_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    game_service: GameService = Depends(get_game_service),
):
    await game_service.delete_game(game_id)
    return success_response(message="Game deleted")
