"""
알림 서비스
알림 저장 후 기기 토큰이 있는 사용자에게 푸시를 전달한다.
"""
import logging
from typing import Optional, Sequence

from playerduo.core.exceptions import NotFoundError
from playerduo.models.domain.notification import Notification
from playerduo.repositories.notification_repository import NotificationRepository
from playerduo.repositories.user_repository import UserRepository
from playerduo.services.notification.push import PushSender, LoggingPushSender

logger = logging.getLogger(__name__)

RECENT_NOTIFICATION_LIMIT = 10

class NotificationService:

    def __init__(
        self,
        notification_repo: NotificationRepository,
        user_repo: UserRepository,
        push_sender: Optional[PushSender] = None,
    ):
        self.notification_repo = notification_repo
        self.user_repo = user_repo
        self.push_sender = push_sender or LoggingPushSender()

    async def create_notification(
        self,
        user_id: int,
        title: str,
        message: str,
        type: str,
        action_url: Optional[str] = None,
        reference_id: Optional[int] = None,
    ) -> Notification:
        """알림 저장 및 푸시 전달"""
        notification = await self.notification_repo.add(Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            action_url=action_url,
            reference_id=reference_id,
            is_read=False,
        ))

        user = await self.user_repo.get(user_id)
        if user is not None and user.device_token:
            try:
                await self.push_sender.send(user_id, title, message, type, action_url, reference_id)
            except Exception:
                # 푸시 실패는 알림 저장과 호출한 코인 흐름을 되돌리지 않는다
                logger.exception(f"Push delivery failed for user {user_id} (notification {notification.id})")
        return notification

    async def _get_owned(self, notification_id: int, user_id: int) -> Notification:
        notification = await self.notification_repo.get(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification", notification_id)
        return notification

    async def mark_as_read(self, notification_id: int, user_id: int) -> Notification:
        notification = await self._get_owned(notification_id, user_id)
        notification.is_read = True
        return await self.notification_repo.save(notification)

    async def mark_all_as_read(self, user_id: int) -> int:
        updated = await self.notification_repo.mark_all_read(user_id)
        logger.info(f"Marked {updated} notifications as read for user {user_id}")
        return updated

    async def delete_notification(self, notification_id: int, user_id: int) -> None:
        notification = await self._get_owned(notification_id, user_id)
        await self.notification_repo.delete(notification)

    async def get_user_notifications(self, user_id: int) -> Sequence[Notification]:
        return await self.notification_repo.find_for_user(user_id)

    async def get_unread_notifications(self, user_id: int) -> Sequence[Notification]:
        return await self.notification_repo.find_for_user(user_id, unread_only=True)

    async def get_notifications_by_type(self, user_id: int, type_: str) -> Sequence[Notification]:
        return await self.notification_repo.find_for_user(user_id, type_=type_)

    async def get_recent_notifications(self, user_id: int) -> Sequence[Notification]:
        return await self.notification_repo.find_for_user(user_id, limit=RECENT_NOTIFICATION_LIMIT)

    async def count_unread(self, user_id: int) -> int:
        return await self.notification_repo.count_unread(user_id)

    async def update_device_token(self, user_id: int, device_token: str) -> None:
        user = await self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        user.device_token = device_token
        await self.user_repo.save(user)
        logger.info(f"Device token updated for user {user_id}")
