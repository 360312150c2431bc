"""
사용자 데이터 접근 로직 (Repository)
"""
import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm.attributes import set_committed_value

from playerduo.core.repository import BaseRepository
from playerduo.models.domain.user import User, PasswordResetToken, UserBlock

logger = logging.getLogger(__name__)

class UserRepository(BaseRepository[User]):
    """사용자 및 코인 잔액 관련 데이터베이스 작업을 처리합니다."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def exists_by_username(self, username: str) -> bool:
        return await self.count({"username": username}) > 0

    async def exists_by_email(self, email: str) -> bool:
        return await self.count({"email": email}) > 0

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        stmt = select(func.count(User.id)).where(User.created_at >= start, User.created_at < end)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def find_recent(self, limit: int = 10) -> Sequence[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_balance(self, user_id: int) -> Optional[int]:
        result = await self.session.execute(select(User.coin).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def credit_coin(self, user_id: int, amount: int) -> Optional[int]:
        """잔액 증가. 사용자가 없으면 None 반환"""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(coin=User.coin + amount)
            .returning(User.coin)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        new_balance = result.scalar_one_or_none()
        if new_balance is not None:
            await self._sync_loaded_balance(user_id, new_balance)
        return new_balance

    async def debit_coin(self, user_id: int, amount: int) -> Optional[int]:
        """
        조건부 잔액 차감 (coin >= amount 인 경우에만).
        갱신된 행이 없으면 None 반환 (잔액 부족 또는 사용자 없음).
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.coin >= amount)
            .values(coin=User.coin - amount)
            .returning(User.coin)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        new_balance = result.scalar_one_or_none()
        if new_balance is not None:
            await self._sync_loaded_balance(user_id, new_balance)
        return new_balance

    async def _sync_loaded_balance(self, user_id: int, new_balance: int) -> None:
        # 세션에 이미 로드된 User 객체의 coin 값을 DB와 맞춘다 (dirty 표시 없이)
        user = await self.session.get(User, user_id)
        if user is not None:
            set_committed_value(user, "coin", new_balance)

class PasswordResetTokenRepository(BaseRepository[PasswordResetToken]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, PasswordResetToken)

    async def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        result = await self.session.execute(select(PasswordResetToken).where(PasswordResetToken.token == token))
        return result.scalar_one_or_none()

    async def delete_by_user(self, user_id: int) -> None:
        await self.session.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user_id))

class UserBlockRepository(BaseRepository[UserBlock]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, UserBlock)

    async def get_block(self, blocker_id: int, blocked_id: int) -> Optional[UserBlock]:
        return await self.find_one({"blocker_id": blocker_id, "blocked_id": blocked_id})

    async def is_blocked(self, blocker_id: int, blocked_id: int) -> bool:
        return await self.get_block(blocker_id, blocked_id) is not None

    async def find_blocked_users(self, blocker_id: int) -> Sequence[User]:
        stmt = (
            select(User)
            .join(UserBlock, UserBlock.blocked_id == User.id)
            .where(UserBlock.blocker_id == blocker_id)
            .order_by(UserBlock.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
