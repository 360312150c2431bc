import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status

from playerduo.core.dependencies import get_current_user, require_admin
from playerduo.core.schemas import StandardResponse
from playerduo.models.domain.user import User
from playerduo.notifications.dependencies import get_notification_service
from playerduo.schemas.notification import (
    NotificationCreate, NotificationResponse, DeviceTokenRequest, UnreadCountResponse,
)
from playerduo.services.notification.notification_service import NotificationService
from playerduo.utils.response import success_response

router = APIRouter(tags=["Notifications"])
logger = logging.getLogger(__name__)

def _dtos(notifications) -> List[NotificationResponse]:
    return [NotificationResponse.model_validate(n) for n in notifications]

@router.post(
    "",
    response_model=StandardResponse[NotificationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="알림 생성 (관리자)",
)
async def create_notification(
    request: NotificationCreate,
    _: User = Depends(require_admin),
    notification_service: NotificationService = Depends(get_notification_service),
):
    notification = await notification_service.create_notification(
        user_id=request.user_id,
        title=request.title,
        message=request.message,
        type=request.type,
        action_url=request.action_url,
        reference_id=request.reference_id,
    )
    return success_response(data=NotificationResponse.model_validate(notification), message="Notification created")

@router.put("/read-all", response_model=StandardResponse[UnreadCountResponse], summary="모든 알림 읽음 처리")
async def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    updated = await notification_service.mark_all_as_read(current_user.id)
    return success_response(data=UnreadCountResponse(count=updated), message="All notifications marked as read")

@router.put("/{notification_id}/read", response_model=StandardResponse[NotificationResponse], summary="알림 읽음 처리")
async def mark_as_read(
    notification_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    notification = await notification_service.mark_as_read(notification_id, current_user.id)
    return success_response(data=NotificationResponse.model_validate(notification))

@router.delete("/{notification_id}", response_model=StandardResponse[None], summary="알림 삭제")
async def delete_notification(
    notification_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    await notification_service.delete_notification(notification_id, current_user.id)
    return success_response(message="Notification deleted")

@router.get("/user", response_model=StandardResponse[List[NotificationResponse]], summary="내 알림 전체")
async def get_user_notifications(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return success_response(data=_dtos(await notification_service.get_user_notifications(current_user.id)))

@router.get("/unread", response_model=StandardResponse[List[NotificationResponse]], summary="읽지 않은 알림")
async def get_unread_notifications(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return success_response(data=_dtos(await notification_service.get_unread_notifications(current_user.id)))

@router.get("/unread/count", response_model=StandardResponse[UnreadCountResponse], summary="읽지 않은 알림 수")
async def count_unread(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    count = await notification_service.count_unread(current_user.id)
    return success_response(data=UnreadCountResponse(count=count))

@router.get("/type/{type_}", response_model=StandardResponse[List[NotificationResponse]], summary="유형별 알림")
async def get_notifications_by_type(
    type_: str = Path(..., min_length=1, max_length=50),
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    notifications = await notification_service.get_notifications_by_type(current_user.id, type_)
    return success_response(data=_dtos(notifications))

@router.get("/recent", response_model=StandardResponse[List[NotificationResponse]], summary="최근 알림 10건")
async def get_recent_notifications(
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return success_response(data=_dtos(await notification_service.get_recent_notifications(current_user.id)))

@router.post("/device-token", response_model=StandardResponse[None], summary="푸시 기기 토큰 등록")
async def update_device_token(
    request: DeviceTokenRequest,
    current_user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    await notification_service.update_device_token(current_user.id, request.device_token)
    return success_response(message="Device token updated")
