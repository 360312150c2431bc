"""
게임 / 게임 플레이어 / 팔로우 데이터 접근 로직
"""
import logging
from typing import Optional, Sequence, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from playerduo.core.repository import BaseRepository
from playerduo.models.domain.game import Game, GamePlayer, PlayerFollow
from playerduo.models.domain.payment import Order, Payment, PlayerReview
from playerduo.models.enums import PaymentStatus, PaymentType

logger = logging.getLogger(__name__)

class GameRepository(BaseRepository[Game]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, Game)

    async def get_by_name(self, name: str) -> Optional[Game]:
        result = await self.session.execute(select(Game).where(Game.name == name))
        return result.scalar_one_or_none()

    async def find_all(self) -> Sequence[Game]:
        result = await self.session.execute(select(Game).order_by(Game.id))
        return result.scalars().all()

    async def count_players(self, game_id: int) -> int:
        stmt = select(func.count(GamePlayer.id)).where(GamePlayer.game_id == game_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def player_counts(self) -> Dict[int, int]:
        """게임별 등록된 플레이어 수"""
        stmt = select(GamePlayer.game_id, func.count(GamePlayer.id)).group_by(GamePlayer.game_id)
        result = await self.session.execute(stmt)
        return {game_id: count for game_id, count in result.all()}

class GamePlayerRepository(BaseRepository[GamePlayer]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, GamePlayer)

    async def find_by_game(self, game_id: Optional[int] = None) -> Sequence[GamePlayer]:
        stmt = select(GamePlayer).order_by(GamePlayer.id)
        if game_id is not None:
            stmt = stmt.where(GamePlayer.game_id == game_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_by_user(self, user_id: int) -> Sequence[GamePlayer]:
        result = await self.session.execute(
            select(GamePlayer).where(GamePlayer.user_id == user_id).order_by(GamePlayer.id)
        )
        return result.scalars().all()

    async def get_by_user_and_game(self, user_id: int, game_id: int) -> Optional[GamePlayer]:
        return await self.find_one({"user_id": user_id, "game_id": game_id})

    async def order_counts(self, game_player_ids: List[int]) -> Dict[int, int]:
        if not game_player_ids:
            return {}
        stmt = (
            select(Order.game_player_id, func.count(Order.id))
            .where(Order.game_player_id.in_(game_player_ids))
            .group_by(Order.game_player_id)
        )
        result = await self.session.execute(stmt)
        return {gp_id: count for gp_id, count in result.all()}

    async def rating_stats(self, game_player_ids: List[int]) -> Dict[int, tuple]:
        """game_player_id -> (평균 평점, 리뷰 수)"""
        if not game_player_ids:
            return {}
        stmt = (
            select(PlayerReview.game_player_id, func.avg(PlayerReview.rating), func.count(PlayerReview.id))
            .where(PlayerReview.game_player_id.in_(game_player_ids))
            .group_by(PlayerReview.game_player_id)
        )
        result = await self.session.execute(stmt)
        return {gp_id: (float(avg or 0.0), count) for gp_id, avg, count in result.all()}

    async def revenue_totals(self, game_player_ids: List[int]) -> Dict[int, int]:
        """완료된 고용 결제 합계"""
        if not game_player_ids:
            return {}
        stmt = (
            select(Payment.game_player_id, func.coalesce(func.sum(Payment.coin), 0))
            .where(
                Payment.game_player_id.in_(game_player_ids),
                Payment.type == PaymentType.HIRE,
                Payment.status == PaymentStatus.COMPLETED,
            )
            .group_by(Payment.game_player_id)
        )
        result = await self.session.execute(stmt)
        return {gp_id: int(total) for gp_id, total in result.all()}

class PlayerFollowRepository(BaseRepository[PlayerFollow]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, PlayerFollow)

    async def get_follow(self, follower_id: int, game_player_id: int) -> Optional[PlayerFollow]:
        return await self.find_one({"follower_id": follower_id, "game_player_id": game_player_id})

    async def count_followers(self, game_player_id: int) -> int:
        return await self.count({"game_player_id": game_player_id})

    async def follower_counts(self, game_player_ids: List[int]) -> Dict[int, int]:
        if not game_player_ids:
            return {}
        stmt = (
            select(PlayerFollow.game_player_id, func.count(PlayerFollow.id))
            .where(PlayerFollow.game_player_id.in_(game_player_ids))
            .group_by(PlayerFollow.game_player_id)
        )
        result = await self.session.execute(stmt)
        return {gp_id: count for gp_id, count in result.all()}

    async def follower_user_ids(self, game_player_id: int) -> List[int]:
        result = await self.session.execute(
            select(PlayerFollow.follower_id).where(PlayerFollow.game_player_id == game_player_id)
        )
        return list(result.scalars().all())

    async def followed_player_ids(self, follower_id: int) -> List[int]:
        result = await self.session.execute(
            select(PlayerFollow.game_player_id).where(PlayerFollow.follower_id == follower_id)
        )
        return list(result.scalars().all())
