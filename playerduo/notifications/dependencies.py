from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.repositories.notification_repository import NotificationRepository
from playerduo.repositories.user_repository import UserRepository
from playerduo.services.notification.notification_service import NotificationService
from playerduo.services.notification.push import get_push_sender

async def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(
        notification_repo=NotificationRepository(db),
        user_repo=UserRepository(db),
        push_sender=get_push_sender(),
    )
