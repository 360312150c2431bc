from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis

from playerduo.core.dependencies import get_db, get_redis
from playerduo.notifications.dependencies import get_notification_service
from playerduo.repositories.game_repository import GamePlayerRepository
from playerduo.repositories.payment_repository import PaymentRepository, OrderRepository, PlayerReviewRepository
from playerduo.repositories.user_repository import UserRepository, UserBlockRepository
from playerduo.services.notification.notification_service import NotificationService
from playerduo.services.payment.gateway_service import PaymentGatewayService
from playerduo.services.payment.vnpay_service import get_vnpay_service
from playerduo.services.wallet.hire_service import HireService
from playerduo.services.wallet.wallet_service import WalletService

async def get_wallet_service(
    db: AsyncSession = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis),
    notification_service: NotificationService = Depends(get_notification_service),
) -> WalletService:
    """WalletService 인스턴스를 생성하고 반환하는 의존성 함수"""
    return WalletService(
        user_repo=UserRepository(db),
        payment_repo=PaymentRepository(db),
        order_repo=OrderRepository(db),
        game_player_repo=GamePlayerRepository(db),
        block_repo=UserBlockRepository(db),
        notification_service=notification_service,
        redis_client=redis_client,
    )

async def get_hire_service(
    db: AsyncSession = Depends(get_db),
    wallet_service: WalletService = Depends(get_wallet_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> HireService:
    return HireService(
        wallet_service=wallet_service,
        payment_repo=PaymentRepository(db),
        order_repo=OrderRepository(db),
        review_repo=PlayerReviewRepository(db),
        game_player_repo=GamePlayerRepository(db),
        block_repo=UserBlockRepository(db),
        notification_service=notification_service,
    )

async def get_gateway_service(
    db: AsyncSession = Depends(get_db),
    wallet_service: WalletService = Depends(get_wallet_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> PaymentGatewayService:
    return PaymentGatewayService(
        vnpay=get_vnpay_service(),
        payment_repo=PaymentRepository(db),
        user_repo=UserRepository(db),
        wallet_service=wallet_service,
        notification_service=notification_service,
    )
