"""
플레이어 신고 서비스
"""
import logging
from typing import Optional, Sequence, Dict

from playerduo.core.exceptions import NotFoundError, BusinessLogicError
from playerduo.models.domain.report import Report
from playerduo.models.domain.user import User
from playerduo.models.enums import ReportStatus, ACTIVE_REPORT_STATUSES, NotificationType
from playerduo.repositories.game_repository import GamePlayerRepository
from playerduo.repositories.report_repository import ReportRepository
from playerduo.services.notification.notification_service import NotificationService
from playerduo.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (ReportStatus.RESOLVED, ReportStatus.REJECTED)

class ReportService:

    def __init__(
        self,
        report_repo: ReportRepository,
        game_player_repo: GamePlayerRepository,
        notification_service: NotificationService,
    ):
        self.report_repo = report_repo
        self.game_player_repo = game_player_repo
        self.notification_service = notification_service

    async def create_report(
        self,
        reporter: User,
        reported_player_id: int,
        reason: str,
        description: Optional[str] = None,
        video: Optional[str] = None,
    ) -> Report:
        if await self.game_player_repo.get(reported_player_id) is None:
            raise NotFoundError("GamePlayer", reported_player_id, "Game player not found")
        existing = await self.report_repo.find_active_by_pair(reporter.id, reported_player_id, ACTIVE_REPORT_STATUSES)
        if existing is not None:
            raise BusinessLogicError("You have already reported this player and the report is still being processed")

        report = await self.report_repo.add(Report(
            reported_player_id=reported_player_id,
            reporter_id=reporter.id,
            reason=reason,
            description=description,
            video=video,
            status=ReportStatus.PENDING,
        ))
        logger.info(f"Report {report.id} created by user {reporter.id} against game player {reported_player_id}")
        return report

    async def get_report(self, report_id: int) -> Report:
        report = await self.report_repo.get(report_id)
        if report is None:
            raise NotFoundError("Report", report_id)
        return report

    async def update_report_status(self, report_id: int, status: ReportStatus, resolution: Optional[str] = None) -> Report:
        """상태 변경. 종결 상태이면 resolved_at 기록 후 신고자에게 알림"""
        report = await self.get_report(report_id)
        report.status = status
        if resolution is not None:
            report.resolution = resolution
        report.resolved_at = utcnow() if status in TERMINAL_STATUSES else None
        await self.report_repo.save(report)

        await self.notification_service.create_notification(
            report.reporter_id,
            "Cập nhật báo cáo",
            f"Báo cáo #{report.id} của bạn đã được cập nhật trạng thái: {status.value}."
            + (f" {resolution}" if resolution else ""),
            NotificationType.REPORT.value,
            reference_id=report.id,
        )
        logger.info(f"Report {report.id} status changed to {status.value}")
        return report

    async def get_reports_by_reporter(self, reporter_id: int) -> Sequence[Report]:
        return await self.report_repo.find_by_reporter(reporter_id)

    async def get_reports_by_player(self, game_player_id: int) -> Sequence[Report]:
        return await self.report_repo.find_by_reported_player(game_player_id)

    async def get_reports_by_status(self, status: ReportStatus) -> Sequence[Report]:
        return await self.report_repo.find_by_statuses([status])

    async def get_active_reports(self) -> Sequence[Report]:
        return await self.report_repo.find_by_statuses(ACTIVE_REPORT_STATUSES)

    async def get_all_reports(self) -> Sequence[Report]:
        return await self.report_repo.find_all()

    async def delete_report(self, report_id: int) -> None:
        report = await self.get_report(report_id)
        await self.report_repo.delete(report)
        logger.info(f"Report {report_id} deleted")

    async def get_summary(self) -> Dict[str, int]:
        return {
            "total": await self.report_repo.count(),
            "unprocessed": await self.report_repo.count({"status": ReportStatus.PENDING}),
        }
