from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from playerduo.core.repository import BaseRepository
from playerduo.models.domain.notification import Notification

class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, Notification)

    async def find_for_user(self, user_id: int, unread_only: bool = False, type_: str = None, limit: int = 0) -> Sequence[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)  # noqa: E712
        if type_:
            stmt = stmt.where(Notification.type == type_)
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        if limit > 0:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_unread(self, user_id: int) -> int:
        return await self.count({"user_id": user_id, "is_read": False})

    async def mark_all_read(self, user_id: int) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
