"""
지갑 서비스
코인 잔액 변경과 원장(Payment) 기록을 같은 트랜잭션에서 처리한다.
"""
import logging
from datetime import datetime
from typing import Optional, Dict, Any, List, Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from playerduo.cache.redis_cache import balance_cache_key
from playerduo.core.config import settings
from playerduo.core.exceptions import (
    NotFoundError, InvalidInputError, InsufficientFundsError, InvalidAmountError,
    InvalidPaymentStatusError, PermissionDeniedError, BusinessLogicError,
)
from playerduo.models.domain.payment import Payment, Order
from playerduo.models.domain.user import User
from playerduo.models.enums import (
    PaymentStatus, PaymentType, PaymentMethod, OrderStatus, GamePlayerStatus, NotificationType, Role,
)
from playerduo.repositories.user_repository import UserRepository, UserBlockRepository
from playerduo.repositories.payment_repository import PaymentRepository, OrderRepository
from playerduo.repositories.game_repository import GamePlayerRepository
from playerduo.services.notification.notification_service import NotificationService

logger = logging.getLogger(__name__)

# 충전 내역 상태 표시 (텍스트, 색상)
TOPUP_STATUS_DISPLAY = {
    PaymentStatus.COMPLETED: ("Thành công", "#4CAF50"),
    PaymentStatus.PENDING: ("Đang xử lý", "#FFA500"),
    PaymentStatus.FAILED: ("Thất bại", "#F44336"),
}
DEFAULT_STATUS_COLOR = "#9E9E9E"

REFUNDABLE_TYPES = (PaymentType.HIRE, PaymentType.DONATE)

def validate_amount(coin: Any) -> int:
    """양의 정수 코인 금액만 허용"""
    if isinstance(coin, bool) or not isinstance(coin, int) or coin <= 0:
        raise InvalidAmountError(coin, "Số coin phải lớn hơn 0")
    return coin

class WalletService:
    """코인 지갑 및 결제 원장 서비스"""

    def __init__(
        self,
        user_repo: UserRepository,
        payment_repo: PaymentRepository,
        order_repo: OrderRepository,
        game_player_repo: GamePlayerRepository,
        block_repo: UserBlockRepository,
        notification_service: NotificationService,
        redis_client: Optional[Redis] = None,
    ):
        self.user_repo = user_repo
        self.payment_repo = payment_repo
        self.order_repo = order_repo
        self.game_player_repo = game_player_repo
        self.block_repo = block_repo
        self.notification_service = notification_service
        self.redis = redis_client

    # --- 잔액 / 캐시 ---

    async def get_balance(self, user_id: int) -> int:
        """사용자 코인 잔액 조회 (Redis 설정 시 캐시 사용)"""
        key = balance_cache_key(user_id)
        if self.redis is not None:
            try:
                cached = await self.redis.get(key)
                if cached is not None:
                    return int(cached)
            except RedisError as e:
                logger.warning(f"Balance cache read failed for user {user_id}: {e}")

        balance = await self.user_repo.get_balance(user_id)
        if balance is None:
            raise NotFoundError("User", user_id)

        if self.redis is not None:
            try:
                await self.redis.set(key, balance, ex=settings.BALANCE_CACHE_TTL_SECONDS)
            except RedisError as e:
                logger.warning(f"Balance cache write failed for user {user_id}: {e}")
        return balance

    async def invalidate_balance(self, *user_ids: int) -> None:
        if self.redis is None or not user_ids:
            return
        try:
            await self.redis.delete(*(balance_cache_key(uid) for uid in user_ids))
        except RedisError as e:
            logger.warning(f"Balance cache invalidation failed for users {user_ids}: {e}")

    async def credit(self, user_id: int, coin: int) -> int:
        new_balance = await self.user_repo.credit_coin(user_id, coin)
        if new_balance is None:
            raise NotFoundError("User", user_id)
        await self.invalidate_balance(user_id)
        logger.info(f"Credited {coin} coin to user {user_id}. New balance: {new_balance}")
        return new_balance

    async def debit(self, user_id: int, coin: int) -> int:
        """조건부 차감. 잔액이 부족하면 InsufficientFundsError"""
        new_balance = await self.user_repo.debit_coin(user_id, coin)
        if new_balance is None:
            current = await self.user_repo.get_balance(user_id)
            if current is None:
                raise NotFoundError("User", user_id)
            logger.warning(f"Insufficient funds for user {user_id}: requested {coin}, available {current}")
            raise InsufficientFundsError(user_id, coin, current)
        await self.invalidate_balance(user_id)
        logger.info(f"Debited {coin} coin from user {user_id}. New balance: {new_balance}")
        return new_balance

    # --- 지갑 작업 ---

    async def top_up(self, user: User, coin: int) -> Dict[str, Any]:
        """코인 충전 (즉시 완료)"""
        coin = validate_amount(coin)
        balance = await self.credit(user.id, coin)
        payment = await self.payment_repo.add(Payment(
            user_id=user.id,
            coin=coin,
            currency="COIN",
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.TOPUP,
            type=PaymentType.TOPUP,
        ))
        await self.notification_service.create_notification(
            user.id,
            "Nạp xu thành công!",
            f"Bạn vừa nạp thành công {coin} xu vào tài khoản.",
            NotificationType.TOPUP.value,
            reference_id=payment.id,
        )
        return {"message": "Nạp coin thành công", "coin": coin, "balance": balance, "payment_id": payment.id}

    async def withdraw(self, user: User, coin: int) -> Dict[str, Any]:
        """코인 출금 (PLAYER 전용)"""
        if not user.has_role(Role.PLAYER):
            raise PermissionDeniedError(Role.PLAYER.value)
        coin = validate_amount(coin)
        balance = await self.debit(user.id, coin)
        payment = await self.payment_repo.add(Payment(
            user_id=user.id,
            coin=coin,
            currency="COIN",
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.WITHDRAW,
            type=PaymentType.WITHDRAW,
        ))
        await self.notification_service.create_notification(
            user.id,
            "Rút coin thành công",
            f"Bạn đã rút thành công {coin} coin.",
            NotificationType.WITHDRAW.value,
            reference_id=payment.id,
        )
        return {"message": "Rút coin thành công", "coin": coin, "balance": balance, "payment_id": payment.id}

    async def donate(self, user: User, game_player_id: int, coin: int, message: Optional[str] = None) -> Dict[str, Any]:
        """게임 플레이어 소유자에게 코인 후원"""
        coin = validate_amount(coin)
        game_player = await self.game_player_repo.get(game_player_id)
        if game_player is None:
            raise NotFoundError("GamePlayer", game_player_id)
        receiver_id = game_player.user_id
        if receiver_id == user.id:
            raise BusinessLogicError("Không thể donate cho chính mình")
        if await self.block_repo.is_blocked(receiver_id, user.id):
            raise BusinessLogicError("Bạn đã bị người chơi này chặn")

        balance = await self.debit(user.id, coin)
        await self.credit(receiver_id, coin)
        payment = await self.payment_repo.add(Payment(
            user_id=user.id,
            game_player_id=game_player.id,
            player_id=receiver_id,
            coin=coin,
            currency="COIN",
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.DONATE,
            type=PaymentType.DONATE,
            description=message,
        ))

        await self.notification_service.create_notification(
            receiver_id,
            "Bạn nhận được donate!",
            f"{user.username} đã donate cho bạn {coin} xu." + (f" Lời nhắn: {message}" if message else ""),
            NotificationType.DONATE.value,
            reference_id=payment.id,
        )
        await self.notification_service.create_notification(
            user.id,
            "Donate thành công",
            f"Bạn đã donate {coin} xu cho {game_player.username}.",
            NotificationType.DONATE.value,
            reference_id=payment.id,
        )
        return {"message": "Donate thành công", "coin": coin, "balance": balance, "payment_id": payment.id}

    # --- 결제 레코드 ---

    async def get_payment(self, payment_id: int) -> Payment:
        payment = await self.payment_repo.get(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def create_payment(
        self,
        user: User,
        game_player_id: int,
        coin: int,
        currency: str = "COIN",
        payment_method: PaymentMethod = PaymentMethod.COIN,
    ) -> Payment:
        """잔액 변경 없이 PENDING 결제 레코드 생성"""
        coin = validate_amount(coin)
        game_player = await self.game_player_repo.get(game_player_id)
        if game_player is None:
            raise NotFoundError("GamePlayer", game_player_id)
        payment = await self.payment_repo.add(Payment(
            user_id=user.id,
            game_player_id=game_player.id,
            player_id=game_player.user_id,
            coin=coin,
            currency=currency,
            status=PaymentStatus.PENDING,
            payment_method=payment_method,
            type=PaymentType.HIRE,
        ))
        logger.info(f"Payment {payment.id} created (PENDING) by user {user.id} for game player {game_player_id}")
        return payment

    async def process_payment(self, payment_id: int, transaction_id: str) -> Payment:
        """PENDING -> COMPLETED, 외부 거래 ID 기록"""
        payment = await self.get_payment(payment_id)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidPaymentStatusError(payment.id, payment.status, PaymentStatus.PENDING.value)
        updated = await self.payment_repo.transition_status(
            payment, PaymentStatus.PENDING, PaymentStatus.COMPLETED, transaction_id=transaction_id
        )
        if not updated:
            raise InvalidPaymentStatusError(payment.id, payment.status, PaymentStatus.PENDING.value)
        return payment

    async def refund_payment(self, payment_id: int, reason: str) -> Payment:
        """
        HIRE / DONATE 결제 환불.

        고용 결제는 에스크로 주문(Order)이 있는 경우에만 환불한다.
        create_payment 로 기록만 된 결제는 코인이 이동하지 않았으므로 대상이 아니다.
        PENDING 고용 결제는 에스크로된 코인을 고용자에게 돌려주고,
        COMPLETED 결제는 수령자에게서 차감해 지불자에게 돌려준다.
        환불 원장(REFUND) 레코드를 함께 기록한다.
        """
        payment = await self.get_payment(payment_id)
        if payment.type not in REFUNDABLE_TYPES:
            raise InvalidPaymentStatusError(payment.id, payment.status, "HIRE or DONATE payment")

        order = None
        if payment.type == PaymentType.HIRE:
            order = await self.order_repo.get_by_payment_id(payment.id)
            if order is None:
                logger.warning(f"Refund rejected for payment {payment.id}: no escrow order, no coin was moved")
                raise InvalidPaymentStatusError(payment.id, payment.status, "HIRE payment with an escrow order")

        from_status = payment.status
        if from_status == PaymentStatus.PENDING and payment.type == PaymentType.HIRE:
            receiver_debit = False
        elif from_status == PaymentStatus.COMPLETED:
            receiver_debit = payment.player_id is not None
        else:
            raise InvalidPaymentStatusError(payment.id, payment.status, "PENDING or COMPLETED")

        if not await self.payment_repo.transition_status(payment, from_status, PaymentStatus.REFUNDED):
            raise InvalidPaymentStatusError(payment.id, payment.status, from_status.value)

        if receiver_debit:
            await self.debit(payment.player_id, payment.coin)
        await self.credit(payment.user_id, payment.coin)

        refund = await self.payment_repo.add(Payment(
            user_id=payment.user_id,
            game_player_id=payment.game_player_id,
            player_id=payment.player_id,
            coin=payment.coin,
            currency=payment.currency,
            status=PaymentStatus.COMPLETED,
            payment_method=PaymentMethod.COIN,
            type=PaymentType.REFUND,
            transaction_id=str(payment.id),
            description=reason,
        ))
        if order is not None:
            await self._release_hire_order(order, payment.user_id)

        await self.notification_service.create_notification(
            payment.user_id,
            "Hoàn tiền thành công",
            f"Bạn đã được hoàn {payment.coin} xu. Lý do: {reason}",
            NotificationType.REFUND.value,
            reference_id=refund.id,
        )
        if payment.player_id is not None:
            await self.notification_service.create_notification(
                payment.player_id,
                "Giao dịch đã được hoàn tiền",
                f"Giao dịch #{payment.id} ({payment.coin} xu) đã được hoàn lại. Lý do: {reason}",
                NotificationType.REFUND.value,
                reference_id=refund.id,
            )
        logger.info(f"Payment {payment.id} refunded ({payment.coin} coin), refund record {refund.id}")
        return payment

    async def _release_hire_order(self, order: Order, renter_id: int) -> None:
        # 환불된 고용 결제의 주문 취소 및 플레이어 상태 복구
        if order.status not in (OrderStatus.PENDING, OrderStatus.CONFIRMED):
            return
        order.status = OrderStatus.CANCELED
        await self.order_repo.save(order)
        game_player = await self.game_player_repo.get(order.game_player_id)
        if game_player is not None and game_player.hired_by == renter_id:
            game_player.status = GamePlayerStatus.AVAILABLE
            game_player.hired_by = None
            await self.game_player_repo.save(game_player)

    # --- 조회 ---

    async def get_user_payments(self, user_id: int) -> Sequence[Payment]:
        return await self.payment_repo.find_by_user(user_id)

    async def get_game_player_payments(self, game_player_id: int) -> Sequence[Payment]:
        return await self.payment_repo.find_by_game_player(game_player_id)

    async def get_payments_by_status(self, status: str) -> Sequence[Payment]:
        try:
            payment_status = PaymentStatus[status.upper()]
        except KeyError:
            raise InvalidInputError(f"Invalid payment status: {status}")
        return await self.payment_repo.find_by_status(payment_status)

    async def get_payments_by_date_range(self, start: datetime, end: datetime) -> Sequence[Payment]:
        if start > end:
            raise InvalidInputError("start must not be after end")
        return await self.payment_repo.find_by_created_between(start, end)

    async def get_hire_history(self, user_id: int) -> Sequence[Payment]:
        return await self.payment_repo.find_by_user_and_type(user_id, PaymentType.HIRE)

    async def get_player_hire_history(self, player_user_id: int) -> Sequence[Payment]:
        """player_user_id 가 고용되어 받은 결제 내역"""
        return await self.payment_repo.find_by_player_and_type(player_user_id, PaymentType.HIRE)

    async def get_topup_history(self, user_id: int) -> List[Dict[str, Any]]:
        topups = await self.payment_repo.find_by_user_and_type(user_id, PaymentType.TOPUP)
        history = []
        for payment in topups:
            text, color = TOPUP_STATUS_DISPLAY.get(payment.status, (payment.status.value, DEFAULT_STATUS_COLOR))
            history.append({
                "id": payment.id,
                "coin": payment.coin,
                "payment_method": payment.payment_method,
                "status": payment.status,
                "status_text": text,
                "status_color": color,
                "created_at": payment.created_at,
            })
        return history
