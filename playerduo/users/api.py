"""
사용자 API
프로필 조회/수정, 관리자 작업, 온라인 상태, 커버 이미지, 차단 목록
"""
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import Response

from playerduo.core.dependencies import get_current_user, require_admin, common_pagination_params
from playerduo.core.exceptions import AuthorizationError
from playerduo.core.schemas import ErrorResponse, StandardResponse, PaginatedResponse
from playerduo.models.domain.user import User
from playerduo.models.enums import Role
from playerduo.schemas.user import (
    UserCreate, UserUpdate, UserResponse, UserPublicInfo, UserRecentItem, UserSummaryItem,
    PasswordResetByAdmin, RolesUpdate, OnlineStatusResponse, CoverImageResponse, BlockedUserResponse,
)
from playerduo.services.user.user_service import UserService
from playerduo.users.dependencies import get_user_service
from playerduo.utils.response import success_response, paginated_response

router = APIRouter(tags=["Users"])
logger = logging.getLogger(__name__)

ADMIN_ERRORS = {
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "인증되지 않은 접근"},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "관리자 권한 필요"},
}

@router.get("/count", response_model=StandardResponse[Dict[str, int]], summary="전체 사용자 수")
async def count_users(_: User = Depends(require_admin), user_service: UserService = Depends(get_user_service)):
    return success_response(data={"count": await user_service.count_users()})

@router.get("/growth-percent", response_model=StandardResponse[Dict[str, float]], summary="지난주 대비 가입자 증가율")
async def get_growth_percent(_: User = Depends(require_admin), user_service: UserService = Depends(get_user_service)):
    return success_response(data={"growth_percent": await user_service.get_growth_percent()})

@router.get("/recent", response_model=StandardResponse[List[UserRecentItem]], summary="최근 가입 사용자 10명")
async def get_recent_users(_: User = Depends(require_admin), user_service: UserService = Depends(get_user_service)):
    users = await user_service.get_recent_users()
    return success_response(data=[UserRecentItem(**u) for u in users])

@router.get("/summary", response_model=StandardResponse[List[UserSummaryItem]], summary="사용자 요약 목록")
async def get_user_summaries(_: User = Depends(require_admin), user_service: UserService = Depends(get_user_service)):
    users = await user_service.get_user_summaries()
    return success_response(data=[UserSummaryItem(**u) for u in users])

@router.get("/blocked", response_model=StandardResponse[List[BlockedUserResponse]], summary="내가 차단한 사용자")
async def get_blocked_users(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    users = await user_service.get_blocked_users(current_user)
    return success_response(data=[BlockedUserResponse.model_validate(u) for u in users])

@router.get(
    "",
    response_model=PaginatedResponse[UserResponse],
    summary="사용자 목록 (관리자)",
    responses=ADMIN_ERRORS,
)
async def list_users(
    pagination: Dict[str, int] = Depends(common_pagination_params),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    users = await user_service.list_users(offset=pagination["offset"], limit=pagination["limit"])
    total = await user_service.count_users()
    return paginated_response(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination["page"],
        page_size=pagination["limit"],
    )

@router.post(
    "",
    response_model=StandardResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="사용자 생성 (관리자)",
    responses=ADMIN_ERRORS,
)
async def create_user(
    request: UserCreate,
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    profile = request.model_dump(exclude={"username", "email", "password", "roles"}, exclude_none=True)
    user = await user_service.create_user(
        username=request.username,
        email=request.email,
        password=request.password,
        roles=request.roles,
        **profile,
    )
    return success_response(data=UserResponse.model_validate(user), message="User created")

@router.get("/{user_id}", response_model=StandardResponse[UserPublicInfo], summary="사용자 공개 정보")
async def get_user(user_id: int = Path(..., ge=1), user_service: UserService = Depends(get_user_service)):
    user = await user_service.get_user(user_id)
    return success_response(data=UserPublicInfo.model_validate(user))

@router.put("/{user_id}", response_model=StandardResponse[UserResponse], summary="프로필 수정 (본인 또는 관리자)")
async def update_user(
    request: UserUpdate,
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    if current_user.id != user_id and not current_user.has_role(Role.ADMIN):
        raise AuthorizationError("You can only update your own profile")
    user = await user_service.update_user(user_id, request.model_dump(exclude_unset=True))
    return success_response(data=UserResponse.model_validate(user), message="User updated")

@router.delete("/{user_id}", response_model=StandardResponse[None], summary="사용자 삭제 (관리자)", responses=ADMIN_ERRORS)
async def delete_user(
    user_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete_user(user_id)
    return success_response(message="User deleted")

@router.put("/{user_id}/lock", response_model=StandardResponse[UserResponse], summary="계정 잠금", responses=ADMIN_ERRORS)
async def lock_user(
    user_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.set_locked(user_id, True)
    return success_response(data=UserResponse.model_validate(user), message="User locked")

@router.put("/{user_id}/unlock", response_model=StandardResponse[UserResponse], summary="계정 잠금 해제", responses=ADMIN_ERRORS)
async def unlock_user(
    user_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.set_locked(user_id, False)
    return success_response(data=UserResponse.model_validate(user), message="User unlocked")

@router.put("/{user_id}/password", response_model=StandardResponse[None], summary="비밀번호 재설정 (관리자)", responses=ADMIN_ERRORS)
async def reset_password(
    request: PasswordResetByAdmin,
    user_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.reset_password(user_id, request.new_password)
    return success_response(message="Password reset")

@router.put("/{user_id}/roles", response_model=StandardResponse[UserResponse], summary="역할 변경 (관리자)", responses=ADMIN_ERRORS)
async def update_roles(
    request: RolesUpdate,
    user_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.update_roles(user_id, request.roles)
    return success_response(data=UserResponse.model_validate(user), message="Roles updated")

@router.get("/{user_id}/online-status", response_model=StandardResponse[OnlineStatusResponse], summary="온라인 상태")
async def get_online_status(user_id: int = Path(..., ge=1), user_service: UserService = Depends(get_user_service)):
    result = await user_service.get_online_status(user_id)
    return success_response(data=OnlineStatusResponse(**result))

@router.get("/{user_id}/cover-image-url", response_model=StandardResponse[CoverImageResponse], summary="커버 이미지 URL")
async def get_cover_image_url(user_id: int = Path(..., ge=1), user_service: UserService = Depends(get_user_service)):
    url = await user_service.get_cover_image_url(user_id)
    return success_response(data=CoverImageResponse(cover_image_url=url))

@router.get("/{user_id}/cover-image", summary="커버 이미지 파일", response_class=Response)
async def get_cover_image(user_id: int = Path(..., ge=1), user_service: UserService = Depends(get_user_service)):
    content = await user_service.get_cover_image_bytes(user_id)
    return Response(content=content, media_type="image/jpeg")

@router.post("/{user_id}/block", response_model=StandardResponse[None], summary="사용자 차단")
async def block_user(
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.block_user(current_user, user_id)
    return success_response(message="User blocked")

@router.delete("/{user_id}/block", response_model=StandardResponse[None], summary="차단 해제")
async def unblock_user(
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.unblock_user(current_user, user_id)
    return success_response(message="User unblocked")
