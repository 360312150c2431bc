from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.notifications.dependencies import get_notification_service
from playerduo.repositories.game_repository import GamePlayerRepository, PlayerFollowRepository
from playerduo.repositories.moment_repository import MomentRepository
from playerduo.services.moment.moment_service import MomentService
from playerduo.services.notification.notification_service import NotificationService

async def get_moment_service(
    db: AsyncSession = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MomentService:
    return MomentService(
        moment_repo=MomentRepository(db),
        game_player_repo=GamePlayerRepository(db),
        follow_repo=PlayerFollowRepository(db),
        notification_service=notification_service,
    )
