import logging
from typing import Optional, Sequence, Tuple, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from playerduo.core.repository import BaseRepository
from playerduo.models.domain.moment import Moment
from playerduo.models.domain.game import GamePlayer
from playerduo.models.enums import MomentStatus

logger = logging.getLogger(__name__)

class MomentRepository(BaseRepository[Moment]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, Moment)

    async def get_visible(self, moment_id: int) -> Optional[Moment]:
        """삭제되지 않은 모먼트 조회"""
        stmt = select(Moment).where(Moment.id == moment_id, Moment.status != MomentStatus.DELETED)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owned(self, moment_id: int, user_id: int) -> Optional[Moment]:
        """user_id가 소유한 게임 플레이어의 (삭제되지 않은) 모먼트"""
        stmt = (
            select(Moment)
            .join(GamePlayer, GamePlayer.id == Moment.game_player_id)
            .where(
                Moment.id == moment_id,
                GamePlayer.user_id == user_id,
                Moment.status != MomentStatus.DELETED,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def page_by_players(
        self,
        game_player_ids: List[int],
        status: MomentStatus,
        offset: int,
        limit: int,
    ) -> Tuple[Sequence[Moment], int]:
        """game_player_ids 의 모먼트를 최신순으로 페이지 조회. (items, total) 반환"""
        if not game_player_ids:
            return [], 0
        conditions = (Moment.game_player_id.in_(game_player_ids), Moment.status == status)
        total = (await self.session.execute(select(func.count(Moment.id)).where(*conditions))).scalar_one()
        stmt = (
            select(Moment)
            .where(*conditions)
            .order_by(Moment.created_at.desc(), Moment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all(), total

    async def page_by_status(self, status: MomentStatus, offset: int, limit: int) -> Tuple[Sequence[Moment], int]:
        total = await self.count({"status": status})
        stmt = (
            select(Moment)
            .where(Moment.status == status)
            .order_by(Moment.created_at.desc(), Moment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all(), total
