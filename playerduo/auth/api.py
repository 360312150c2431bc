"""
인증 API
"""
import logging

from fastapi import APIRouter, Depends, status

from playerduo.auth.dependencies import get_auth_service
from playerduo.core.dependencies import get_current_user
from playerduo.core.schemas import ErrorResponse, StandardResponse
from playerduo.models.domain.user import User
from playerduo.schemas.auth import (
    RegisterRequest, LoginRequest, TokenResponse, ForgotPasswordRequest, ResetPasswordRequest,
)
from playerduo.schemas.user import UserResponse
from playerduo.services.auth.auth_service import AuthService
from playerduo.utils.response import success_response

router = APIRouter(tags=["Authentication"])
logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email is registered, a password reset link has been sent"

@router.post(
    "/register",
    response_model=StandardResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "중복 사용자명/이메일 또는 비밀번호 정책 위반"}},
)
async def register(request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    user = await auth_service.register(request.username, request.email, request.password, request.full_name)
    return success_response(data=UserResponse.model_validate(user), message="User registered successfully")

@router.post(
    "/login",
    response_model=StandardResponse[TokenResponse],
    summary="로그인 (Bearer 토큰 발급)",
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "잘못된 자격 증명"}},
)
async def login(request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.login(request.username, request.password)
    return success_response(
        data=TokenResponse(
            access_token=result["access_token"],
            token_type=result["token_type"],
            expires_in=result["expires_in"],
            user=UserResponse.model_validate(result["user"]),
        ),
        message="Login successful",
    )

@router.post("/logout", response_model=StandardResponse[None], summary="로그아웃 (오프라인 전환)")
async def logout(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.logout(current_user)
    return success_response(message="Logged out")

@router.get("/me", response_model=StandardResponse[UserResponse], summary="현재 사용자 정보")
async def get_me(current_user: User = Depends(get_current_user)):
    return success_response(data=UserResponse.model_validate(current_user))

@router.post("/forgot-password", response_model=StandardResponse[None], summary="비밀번호 재설정 토큰 발급")
async def forgot_password(request: ForgotPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    # 이메일 존재 여부와 무관하게 동일한 응답
    await auth_service.forgot_password(request.email)
    return success_response(message=FORGOT_PASSWORD_MESSAGE)

@router.post(
    "/reset-password",
    response_model=StandardResponse[None],
    summary="토큰으로 비밀번호 재설정",
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "만료되었거나 잘못된 토큰"}},
)
async def reset_password(request: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    await auth_service.reset_password(request.token, request.new_password)
    return success_response(message="Password has been reset")
