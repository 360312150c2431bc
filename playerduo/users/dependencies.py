from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.repositories.user_repository import UserRepository, UserBlockRepository
from playerduo.services.user.user_service import UserService

async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(user_repo=UserRepository(db), block_repo=UserBlockRepository(db))
