from typing import Optional, Sequence, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from playerduo.core.repository import BaseRepository
from playerduo.models.domain.report import Report
from playerduo.models.enums import ReportStatus

class ReportRepository(BaseRepository[Report]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, Report)

    async def _list(self, *conditions) -> Sequence[Report]:
        stmt = select(Report).where(*conditions).order_by(Report.created_at.desc(), Report.id.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_all(self) -> Sequence[Report]:
        return await self._list()

    async def find_by_reporter(self, reporter_id: int) -> Sequence[Report]:
        return await self._list(Report.reporter_id == reporter_id)

    async def find_by_reported_player(self, game_player_id: int) -> Sequence[Report]:
        return await self._list(Report.reported_player_id == game_player_id)

    async def find_by_statuses(self, statuses: Iterable[ReportStatus]) -> Sequence[Report]:
        return await self._list(Report.status.in_(list(statuses)))

    async def find_active_by_pair(self, reporter_id: int, game_player_id: int, statuses: Iterable[ReportStatus]) -> Optional[Report]:
        return await self.find_one({
            "reporter_id": reporter_id,
            "reported_player_id": game_player_id,
            "status__in": list(statuses),
        })
