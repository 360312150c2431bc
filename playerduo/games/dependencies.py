from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.repositories.game_repository import GameRepository
from playerduo.services.game.game_service import GameService

async def get_game_service(db: AsyncSession = Depends(get_db)) -> GameService:
    return GameService(game_repo=GameRepository(db))
