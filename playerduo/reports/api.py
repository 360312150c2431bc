import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status

from playerduo.core.dependencies import get_current_user, require_admin
from playerduo.core.schemas import ErrorResponse, StandardResponse
from playerduo.models.domain.user import User
from playerduo.models.enums import ReportStatus
from playerduo.reports.dependencies import get_report_service
from playerduo.schemas.report import ReportCreate, ReportStatusUpdate, ReportResponse, ReportSummary
from playerduo.services.report.report_service import ReportService
from playerduo.utils.response import success_response

router = APIRouter(tags=["Reports"])
logger = logging.getLogger(__name__)

def _dtos(reports) -> List[ReportResponse]:
    return [ReportResponse.model_validate(r) for r in reports]

@router.post(
    "",
    response_model=StandardResponse[ReportResponse],
    status_code=status.HTTP_201_CREATED,
    summary="플레이어 신고",
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "처리 중인 신고가 이미 존재"}},
)
async def create_report(
    request: ReportCreate,
    current_user: User = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
):
    report = await report_service.create_report(
        current_user, request.reported_player_id, request.reason, request.description, request.video
    )
    return success_response(data=ReportResponse.model_validate(report), message="Report submitted")

@router.get("", response_model=StandardResponse[List[ReportResponse]], summary="전체 신고 (관리자)")
async def get_all_reports(_: User = Depends(require_admin), report_service: ReportService = Depends(get_report_service)):
    return success_response(data=_dtos(await report_service.get_all_reports()))

@router.get("/summary", response_model=StandardResponse[ReportSummary], summary="신고 요약 (관리자)")
async def get_summary(_: User = Depends(require_admin), report_service: ReportService = Depends(get_report_service)):
    return success_response(data=ReportSummary(**await report_service.get_summary()))

@router.get("/active", response_model=StandardResponse[List[ReportResponse]], summary="처리 대기/진행 중 신고 (관리자)")
async def get_active_reports(_: User = Depends(require_admin), report_service: ReportService = Depends(get_report_service)):
    return success_response(data=_dtos(await report_service.get_active_reports()))

@router.get("/mine", response_model=StandardResponse[List[ReportResponse]], summary="내가 작성한 신고")
async def get_my_reports(
    current_user: User = Depends(get_current_user),
    report_service: ReportService = Depends(get_report_service),
):
    return success_response(data=_dtos(await report_service.get_reports_by_reporter(current_user.id)))

@router.get("/status/{report_status}", response_model=StandardResponse[List[ReportResponse]], summary="상태별 신고 (관리자)")
async def get_reports_by_status(
    report_status: ReportStatus,
    _: User = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
):
    return success_response(data=_dtos(await report_service.get_reports_by_status(report_status)))

@router.get("/player/{game_player_id}", response_model=StandardResponse[List[ReportResponse]], summary="플레이어별 신고 (관리자)")
async def get_reports_by_player(
    game_player_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
):
    return success_response(data=_dtos(await report_service.get_reports_by_player(game_player_id)))

@router.get("/{report_id}", response_model=StandardResponse[ReportResponse], summary="신고 조회 (관리자)")
async def get_report(
    report_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
):
    return success_response(data=ReportResponse.model_validate(await report_service.get_report(report_id)))

@router.put("/{report_id}/status", response_model=StandardResponse[ReportResponse], summary="신고 처리 상태 변경 (관리자)")
async def update_report_status(
    request: ReportStatusUpdate,
    report_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
):
    report = await report_service.update_report_status(report_id, request.status, request.resolution)
    return success_response(data=ReportResponse.model_validate(report), message="Report status updated")

@router.delete("/{report_id}", response_model=StandardResponse[None], summary="신고 삭제 (관리자)")
async def delete_report(
    report_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
):
    await report_service.delete_report(report_id)
    return success_response(message="Report deleted")
