"""
결제 원장 / 주문 / 리뷰 데이터 접근 로직
"""
import logging
from datetime import datetime
from typing import Optional, Sequence, Dict, Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func

from playerduo.core.repository import BaseRepository
from playerduo.models.domain.payment import Payment, Order, PlayerReview
from playerduo.models.enums import PaymentStatus, PaymentType

logger = logging.getLogger(__name__)

class PaymentRepository(BaseRepository[Payment]):
    """결제(원장) 관련 데이터베이스 작업을 처리합니다."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Payment)

    async def _list(self, *conditions) -> Sequence[Payment]:
        stmt = select(Payment).where(*conditions).order_by(Payment.created_at.desc(), Payment.id.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_by_user(self, user_id: int) -> Sequence[Payment]:
        return await self._list(Payment.user_id == user_id)

    async def find_by_game_player(self, game_player_id: int) -> Sequence[Payment]:
        return await self._list(Payment.game_player_id == game_player_id)

    async def find_by_status(self, status: PaymentStatus) -> Sequence[Payment]:
        return await self._list(Payment.status == status)

    async def find_by_created_between(self, start: datetime, end: datetime) -> Sequence[Payment]:
        return await self._list(Payment.created_at >= start, Payment.created_at <= end)

    async def find_by_user_and_type(self, user_id: int, payment_type: PaymentType) -> Sequence[Payment]:
        return await self._list(Payment.user_id == user_id, Payment.type == payment_type)

    async def find_by_player_and_type(self, player_id: int, payment_type: PaymentType) -> Sequence[Payment]:
        return await self._list(Payment.player_id == player_id, Payment.type == payment_type)

    async def get_by_vnp_txn_ref(self, txn_ref: str, for_update: bool = False) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.vnp_txn_ref == txn_ref)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def transition_status(
        self,
        payment: Payment,
        from_status: PaymentStatus,
        to_status: PaymentStatus,
        **values: Any,
    ) -> bool:
        """
        조건부 상태 전이 (현재 상태가 from_status 인 경우에만).
        동시에 들어온 콜백 중 하나만 True를 받는다.
        """
        stmt = (
            update(Payment)
            .where(Payment.id == payment.id, Payment.status == from_status)
            .values(status=to_status, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.refresh(payment)
        if result.rowcount != 1:
            logger.warning(
                f"Payment {payment.id} status transition {from_status.value} -> {to_status.value} skipped "
                f"(current: {payment.status.value})"
            )
            return False
        logger.info(f"Payment {payment.id} status updated to {to_status.value}")
        return True

class OrderRepository(BaseRepository[Order]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, Order)

    async def get_by_payment_id(self, payment_id: int) -> Optional[Order]:
        return await self.find_one({"payment_id": payment_id})

    async def find_by_renter(self, renter_id: int) -> Sequence[Order]:
        return await self.find_many(limit=0, filters={"renter_id": renter_id}, sort_by="created_at", sort_order="desc")

    async def find_by_game_players(self, game_player_ids) -> Sequence[Order]:
        if not game_player_ids:
            return []
        return await self.find_many(
            limit=0, filters={"game_player_id__in": list(game_player_ids)}, sort_by="created_at", sort_order="desc"
        )

class PlayerReviewRepository(BaseRepository[PlayerReview]):

    def __init__(self, session: AsyncSession):
        super().__init__(session, PlayerReview)

    async def exists_by_order(self, order_id: int) -> bool:
        return await self.count({"order_id": order_id}) > 0

    async def find_by_game_players(self, game_player_ids) -> Sequence[PlayerReview]:
        if not game_player_ids:
            return []
        stmt = (
            select(PlayerReview)
            .where(PlayerReview.game_player_id.in_(list(game_player_ids)))
            .order_by(PlayerReview.created_at.desc(), PlayerReview.id.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def rating_summary(self, game_player_ids) -> Dict[str, Any]:
        if not game_player_ids:
            return {"average": 0.0, "count": 0}
        stmt = select(func.avg(PlayerReview.rating), func.count(PlayerReview.id)).where(
            PlayerReview.game_player_id.in_(list(game_player_ids))
        )
        avg, count = (await self.session.execute(stmt)).one()
        return {"average": float(avg) if avg is not None else 0.0, "count": count}
