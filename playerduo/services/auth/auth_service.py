"""
인증 서비스
회원가입, 로그인(JWT 발급), 비밀번호 재설정
"""
import logging
from datetime import timedelta
from typing import Dict, Any, Optional

from playerduo.core.config import settings
from playerduo.core.exceptions import InvalidCredentialsError, AuthenticationError, InvalidInputError
from playerduo.core.security import verify_password, get_password_hash, create_access_token, generate_reset_token
from playerduo.models.domain.user import User, PasswordResetToken
from playerduo.models.enums import Role
from playerduo.repositories.user_repository import UserRepository, PasswordResetTokenRepository
from playerduo.services.user.user_service import UserService, validate_password
from playerduo.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

class AuthService:

    def __init__(
        self,
        user_repo: UserRepository,
        token_repo: PasswordResetTokenRepository,
        user_service: UserService,
    ):
        self.user_repo = user_repo
        self.token_repo = token_repo
        self.user_service = user_service

    async def register(self, username: str, email: str, password: str, full_name: Optional[str] = None) -> User:
        user = await self.user_service.create_user(
            username=username, email=email, password=password, roles=[Role.USER], full_name=full_name
        )
        logger.info(f"User registered: {user.id} ({username})")
        return user

    async def authenticate(self, username: str, password: str) -> User:
        user = await self.user_repo.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for username '{username}'")
            raise InvalidCredentialsError()
        if not user.enabled:
            raise AuthenticationError("Account is disabled")
        if not user.account_non_locked:
            raise AuthenticationError("Account is locked")
        return user

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        """자격 증명 확인 후 액세스 토큰 발급"""
        user = await self.authenticate(username, password)
        expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(user.id, roles=list(user.roles or []), expires_delta=expires)
        await self.user_service.set_online(user, True)
        logger.info(f"User {user.id} logged in")
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": int(expires.total_seconds()),
            "user": user,
        }

    async def logout(self, user: User) -> None:
        await self.user_service.set_online(user, False)

    async def forgot_password(self, email: str) -> Optional[str]:
        """
        일회용 재설정 토큰 발급.
        전달(메일 발송)은 외부 처리이며 여기서는 로그만 남긴다.
        등록되지 않은 이메일이면 None 반환.
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None

        await self.token_repo.delete_by_user(user.id)
        token = generate_reset_token()
        await self.token_repo.add(PasswordResetToken(
            token=token,
            user_id=user.id,
            expires_at=utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_MINUTES),
            used=False,
        ))
        logger.info(f"Password reset token issued for user {user.id}")
        return token

    async def reset_password(self, token: str, new_password: str) -> None:
        reset_token = await self.token_repo.get_by_token(token)
        if reset_token is None or reset_token.used or reset_token.expires_at < utcnow():
            raise InvalidInputError("Invalid or expired reset token")
        validate_password(new_password)

        user = await self.user_repo.get(reset_token.user_id)
        if user is None:
            raise InvalidInputError("Invalid or expired reset token")
        user.password_hash = get_password_hash(new_password)
        reset_token.used = True
        await self.user_repo.save(user)
        logger.info(f"Password reset completed for user {user.id}")
