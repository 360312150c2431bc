from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.dependencies import get_db
from playerduo.notifications.dependencies import get_notification_service
from playerduo.repositories.game_repository import GamePlayerRepository
from playerduo.repositories.report_repository import ReportRepository
from playerduo.services.notification.notification_service import NotificationService
from playerduo.services.report.report_service import ReportService

async def get_report_service(
    db: AsyncSession = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> ReportService:
    return ReportService(
        report_repo=ReportRepository(db),
        game_player_repo=GamePlayerRepository(db),
        notification_service=notification_service,
    )
