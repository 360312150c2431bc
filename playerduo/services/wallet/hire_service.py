"""
플레이어 고용 서비스
고용 시 코인은 에스크로(차감 후 PENDING 결제)로 보관되고
플레이어 확정 시 지급, 거절 / 취소 시 환불된다.
"""
import logging
from datetime import timedelta
from typing import Optional, Dict, Any, Sequence

from playerduo.core.exceptions import (
    NotFoundError, InvalidInputError, AuthorizationError, BusinessLogicError,
    InvalidAmountError, InvalidPaymentStatusError,
)
from playerduo.models.domain.game import GamePlayer
from playerduo.models.domain.payment import Payment, Order, PlayerReview
from playerduo.models.domain.user import User
from playerduo.models.enums import (
    PaymentStatus, PaymentType, PaymentMethod, OrderStatus, GamePlayerStatus, NotificationType,
)
from playerduo.repositories.game_repository import GamePlayerRepository
from playerduo.repositories.payment_repository import PaymentRepository, OrderRepository, PlayerReviewRepository
from playerduo.repositories.user_repository import UserBlockRepository
from playerduo.services.notification.notification_service import NotificationService
from playerduo.services.wallet.wallet_service import WalletService
from playerduo.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

MIN_HIRE_HOURS = 1
MAX_HIRE_HOURS = 24

class HireService:

    def __init__(
        self,
        wallet_service: WalletService,
        payment_repo: PaymentRepository,
        order_repo: OrderRepository,
        review_repo: PlayerReviewRepository,
        game_player_repo: GamePlayerRepository,
        block_repo: UserBlockRepository,
        notification_service: NotificationService,
    ):
        self.wallet_service = wallet_service
        self.payment_repo = payment_repo
        self.order_repo = order_repo
        self.review_repo = review_repo
        self.game_player_repo = game_player_repo
        self.block_repo = block_repo
        self.notification_service = notification_service

    async def _get_game_player(self, game_player_id: int) -> GamePlayer:
        game_player = await self.game_player_repo.get(game_player_id)
        if game_player is None:
            raise NotFoundError("GamePlayer", game_player_id)
        return game_player

    async def _get_order(self, order_id: int) -> Order:
        order = await self.order_repo.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def hire(self, user: User, game_player_id: int, hours: int, message: Optional[str] = None) -> Dict[str, Any]:
        """
        플레이어 고용

        Returns:
            dict: order, payment, balance (고용자의 차감 후 잔액)
        """
        if not isinstance(hours, int) or not MIN_HIRE_HOURS <= hours <= MAX_HIRE_HOURS:
            raise InvalidInputError(f"Số giờ thuê phải từ {MIN_HIRE_HOURS} đến {MAX_HIRE_HOURS}")

        game_player = await self._get_game_player(game_player_id)
        if game_player.user_id == user.id:
            raise BusinessLogicError("Không thể thuê chính mình")
        if game_player.status != GamePlayerStatus.AVAILABLE:
            raise BusinessLogicError("Người chơi hiện không sẵn sàng để thuê")
        if await self.block_repo.is_blocked(game_player.user_id, user.id):
            raise BusinessLogicError("Bạn đã bị người chơi này chặn")

        total_coin = (game_player.price_per_hour or 0) * hours
        if total_coin <= 0:
            raise InvalidAmountError(total_coin, "Giá thuê của người chơi không hợp lệ")

        balance = await self.wallet_service.debit(user.id, total_coin)

        start_time = utcnow()
        end_time = start_time + timedelta(hours=hours)
        payment = await self.payment_repo.add(Payment(
            user_id=user.id,
            game_player_id=game_player.id,
            player_id=game_player.user_id,
            coin=total_coin,
            currency="COIN",
            status=PaymentStatus.PENDING,
            payment_method=PaymentMethod.COIN,
            type=PaymentType.HIRE,
            description=message,
            start_time=start_time,
            end_time=end_time,
        ))
        order = await self.order_repo.add(Order(
            payment_id=payment.id,
            renter_id=user.id,
            game_player_id=game_player.id,
            hours=hours,
            total_coin=total_coin,
            message=message,
            status=OrderStatus.PENDING,
            start_time=start_time,
            end_time=end_time,
        ))

        game_player.status = GamePlayerStatus.HIRED
        game_player.hired_by = user.id
        game_player.hire_date = start_time
        game_player.return_date = end_time
        game_player.total_hours = (game_player.total_hours or 0) + hours
        await self.game_player_repo.save(game_player)

        await self.notification_service.create_notification(
            game_player.user_id,
            "Bạn có đơn thuê mới!",
            f"{user.username} muốn thuê bạn {hours} giờ ({total_coin} xu).",
            NotificationType.HIRE.value,
            reference_id=order.id,
        )
        logger.info(f"User {user.id} hired game player {game_player.id} for {hours}h ({total_coin} coin), order {order.id}")
        return {"order": order, "payment": payment, "balance": balance}

    async def confirm_hire(self, owner: User, order_id: int) -> Order:
        """플레이어가 주문 수락: 에스크로 코인 지급"""
        order = await self._get_order(order_id)
        game_player = await self._get_game_player(order.game_player_id)
        if game_player.user_id != owner.id:
            raise AuthorizationError("Only the hired player can confirm this order")
        if order.status != OrderStatus.PENDING:
            raise BusinessLogicError(f"Order {order.id} is not pending (current: {order.status.value})")

        payment = await self.wallet_service.get_payment(order.payment_id)
        if not await self.payment_repo.transition_status(payment, PaymentStatus.PENDING, PaymentStatus.COMPLETED):
            raise InvalidPaymentStatusError(payment.id, payment.status, PaymentStatus.PENDING.value)
        await self.wallet_service.credit(owner.id, payment.coin)

        order.status = OrderStatus.CONFIRMED
        await self.order_repo.save(order)

        await self.notification_service.create_notification(
            order.renter_id,
            "Đơn thuê đã được chấp nhận",
            f"{game_player.username} đã chấp nhận đơn thuê #{order.id}.",
            NotificationType.HIRE.value,
            reference_id=order.id,
        )
        return order

    async def reject_hire(self, owner: User, order_id: int) -> Order:
        order = await self._get_order(order_id)
        game_player = await self._get_game_player(order.game_player_id)
        if game_player.user_id != owner.id:
            raise AuthorizationError("Only the hired player can reject this order")
        await self._refund_pending_order(order, game_player, OrderStatus.REJECTED, "Người chơi từ chối đơn thuê")
        await self.notification_service.create_notification(
            order.renter_id,
            "Đơn thuê bị từ chối",
            f"{game_player.username} đã từ chối đơn thuê #{order.id}. {order.total_coin} xu đã được hoàn lại.",
            NotificationType.HIRE.value,
            reference_id=order.id,
        )
        return order

    async def cancel_hire(self, renter: User, order_id: int) -> Order:
        order = await self._get_order(order_id)
        if order.renter_id != renter.id:
            raise AuthorizationError("Only the renter can cancel this order")
        game_player = await self._get_game_player(order.game_player_id)
        await self._refund_pending_order(order, game_player, OrderStatus.CANCELED, "Người thuê hủy đơn")
        await self.notification_service.create_notification(
            game_player.user_id,
            "Đơn thuê đã bị hủy",
            f"{renter.username} đã hủy đơn thuê #{order.id}.",
            NotificationType.HIRE.value,
            reference_id=order.id,
        )
        return order

    async def _refund_pending_order(self, order: Order, game_player: GamePlayer, new_status: OrderStatus, reason: str) -> None:
        if order.status != OrderStatus.PENDING:
            raise BusinessLogicError(f"Order {order.id} is not pending (current: {order.status.value})")

        payment = await self.wallet_service.get_payment(order.payment_id)
        if not await self.payment_repo.transition_status(payment, PaymentStatus.PENDING, PaymentStatus.REFUNDED):
            raise InvalidPaymentStatusError(payment.id, payment.status, PaymentStatus.PENDING.value)
        await self.wallet_service.credit(order.renter_id, payment.coin)
        await self.payment_repo.add(Payment(
            user_id=order.renter_id,
            game_player_id=game_player.id,
            player_id=game_player.user_id,
            coin=payment.coin,
            currency=payment.currency,
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.COIN,
            type=PaymentType.REFUND,
            transaction_id=str(payment.id),
            description=reason,
        ))

        order.status = new_status
        await self.order_repo.save(order)
        self._release(game_player)
        await self.game_player_repo.save(game_player)
        logger.info(f"Order {order.id} {new_status.value}: {payment.coin} coin returned to user {order.renter_id}")

    @staticmethod
    def _release(game_player: GamePlayer) -> None:
        game_player.status = GamePlayerStatus.AVAILABLE
        game_player.hired_by = None

    async def complete_hire(self, user: User, order_id: int) -> Order:
        """확정된 주문 종료 (고용자 또는 플레이어)"""
        order = await self._get_order(order_id)
        game_player = await self._get_game_player(order.game_player_id)
        if user.id not in (order.renter_id, game_player.user_id):
            raise AuthorizationError("Not a participant of this order")
        if order.status != OrderStatus.CONFIRMED:
            raise BusinessLogicError(f"Order {order.id} is not confirmed (current: {order.status.value})")

        order.status = OrderStatus.COMPLETED
        await self.order_repo.save(order)
        self._release(game_player)
        await self.game_player_repo.save(game_player)
        return order

    async def get_renter_orders(self, user_id: int) -> Sequence[Order]:
        return await self.order_repo.find_by_renter(user_id)

    async def get_player_orders(self, user_id: int) -> Sequence[Order]:
        game_players = await self.game_player_repo.find_by_user(user_id)
        return await self.order_repo.find_by_game_players([gp.id for gp in game_players])

    # --- 리뷰 ---

    async def review_player(self, user: User, payment_id: int, rating: int, comment: Optional[str] = None) -> PlayerReview:
        payment = await self.wallet_service.get_payment(payment_id)
        if payment.user_id != user.id:
            raise AuthorizationError("Không có quyền đánh giá")
        if payment.end_time is None or payment.end_time > utcnow():
            raise BusinessLogicError("Chưa thể đánh giá, hợp đồng chưa kết thúc")
        if not 1 <= rating <= 5:
            raise InvalidInputError("Rating must be between 1 and 5")

        order = await self.order_repo.get_by_payment_id(payment.id)
        if order is None:
            raise BusinessLogicError("Không tìm thấy đơn thuê tương ứng với paymentId")
        if await self.review_repo.exists_by_order(order.id):
            raise BusinessLogicError("Đã đánh giá cho hợp đồng này")

        review = await self.review_repo.add(PlayerReview(
            game_player_id=order.game_player_id,
            user_id=user.id,
            order_id=order.id,
            rating=rating,
            comment=comment,
            reviewer=user,
        ))
        logger.info(f"User {user.id} reviewed game player {order.game_player_id} ({rating}/5)")
        return review

    async def get_player_reviews(self, player_user_id: int) -> Dict[str, Any]:
        """player_user_id 의 모든 게임 플레이어 프로필에 대한 리뷰"""
        game_players = await self.game_player_repo.find_by_user(player_user_id)
        ids = [gp.id for gp in game_players]
        reviews = await self.review_repo.find_by_game_players(ids)
        summary = await self.review_repo.rating_summary(ids)
        return {"reviews": reviews, "average_rating": summary["average"], "review_count": len(reviews)}
