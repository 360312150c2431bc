from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.repositories.game_repository import GameRepository, GamePlayerRepository, PlayerFollowRepository
from playerduo.services.game.game_player_service import GamePlayerService
from playerduo.services.user.user_service import UserService
from playerduo.users.dependencies import get_user_service

async def get_game_player_service(
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
) -> GamePlayerService:
    return GamePlayerService(
        game_player_repo=GamePlayerRepository(db),
        game_repo=GameRepository(db),
        follow_repo=PlayerFollowRepository(db),
        user_service=user_service,
    )
