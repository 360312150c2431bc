from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.repositories.user_repository import UserRepository, PasswordResetTokenRepository
from playerduo.services.auth.auth_service import AuthService
from playerduo.services.user.user_service import UserService
from playerduo.users.dependencies import get_user_service

async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
) -> AuthService:
    return AuthService(
        user_repo=UserRepository(db),
        token_repo=PasswordResetTokenRepository(db),
        user_service=user_service,
    )
