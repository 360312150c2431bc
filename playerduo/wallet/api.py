"""
결제 / 지갑 API
코인 충전, 출금, 후원, 고용(에스크로), 리뷰, 입금 안내, VNPay 연동
"""
import html
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Path, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from playerduo.core.dependencies import get_current_user, require_admin, require_player, get_client_ip
from playerduo.core.exceptions import AuthorizationError
from playerduo.core.schemas import ErrorResponse, StandardResponse
from playerduo.models.domain.user import User
from playerduo.models.enums import Role
from playerduo.schemas.payment import (
    PaymentResponse, CreatePaymentRequest, ProcessPaymentRequest, RefundRequest,
    CoinRequest, DonateRequest, WalletActionResponse, BalanceResponse,
    DepositRequest, DepositResponse, TopupHistoryItem,
    HireRequest, HireResponse, OrderResponse,
    ReviewRequest, ReviewResponse, PlayerReviewsResponse,
    VnPayCreateResponse, VnPayIpnResponse,
)
from playerduo.services.payment.gateway_service import PaymentGatewayService
from playerduo.services.wallet.hire_service import HireService
from playerduo.services.wallet.wallet_service import WalletService
from playerduo.utils.response import success_response
from playerduo.wallet.dependencies import get_wallet_service, get_hire_service, get_gateway_service

router = APIRouter(tags=["Payments"])  # Prefix handled in api.py
logger = logging.getLogger(__name__)

COMMON_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "잘못된 금액, 잔액 부족 또는 규칙 위반"},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "인증되지 않은 접근"},
}

def _review_dto(review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        game_player_id=review.game_player_id,
        user_id=review.user_id,
        reviewer_username=review.reviewer.username if review.reviewer is not None else None,
        order_id=review.order_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )

def _ensure_self_or_admin(current_user: User, user_id: int) -> None:
    if current_user.id != user_id and not current_user.has_role(Role.ADMIN):
        raise AuthorizationError("You can only view your own payments")

def _receipt_html(coin: int, txn_ref: str) -> str:
    return (
        "<html><head><meta charset='utf-8'><title>Thanh toán thành công</title>"
        "<style>"
        "body { font-family: Arial, sans-serif; background: #f7f7f7; }"
        ".success-box { background: #fff; max-width: 400px; margin: 60px auto; border-radius: 12px;"
        " box-shadow: 0 2px 8px #0001; padding: 32px 24px; text-align: center; }"
        ".success-icon { color: #4CAF50; font-size: 48px; margin-bottom: 16px; }"
        ".amount { color: #ff9800; font-size: 32px; font-weight: bold; margin: 12px 0; }"
        "</style></head><body>"
        "<div class='success-box'>"
        "<div class='success-icon'>&#10004;</div>"
        "<h2>Thanh toán thành công!</h2>"
        "<div>Bạn đã nạp thành công:</div>"
        f"<div class='amount'>{coin} xu</div>"
        f"<div>Mã giao dịch: <b>{html.escape(txn_ref)}</b></div>"
        "</div></body></html>"
    )

# --- 지갑 ---

@router.get(
    "/wallet-balance",
    response_model=StandardResponse[BalanceResponse],
    summary="내 코인 잔액 조회",
    responses=COMMON_ERRORS,
)
async def get_wallet_balance(
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    balance = await wallet_service.get_balance(current_user.id)
    return success_response(data=BalanceResponse(user_id=current_user.id, balance=balance))

@router.post(
    "/topup",
    response_model=StandardResponse[WalletActionResponse],
    summary="코인 충전",
    responses=COMMON_ERRORS,
)
async def top_up(
    request: CoinRequest,
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    result = await wallet_service.top_up(current_user, request.coin)
    return success_response(data=WalletActionResponse(**result), message=result["message"])

@router.post(
    "/withdraw",
    response_model=StandardResponse[WalletActionResponse],
    summary="코인 출금 (플레이어 전용)",
    responses={**COMMON_ERRORS, status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "PLAYER 역할 필요"}},
)
async def withdraw(
    request: CoinRequest,
    current_user: User = Depends(require_player),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    result = await wallet_service.withdraw(current_user, request.coin)
    return success_response(data=WalletActionResponse(**result), message=result["message"])

@router.post(
    "/donate",
    response_model=StandardResponse[WalletActionResponse],
    summary="게임 플레이어에게 후원",
    responses=COMMON_ERRORS,
)
async def donate(
    request: DonateRequest,
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    result = await wallet_service.donate(current_user, request.game_player_id, request.coin, request.message)
    return success_response(data=WalletActionResponse(**result), message=result["message"])

@router.post(
    "/deposit",
    response_model=StandardResponse[DepositResponse],
    summary="입금 안내 (QR / 계좌이체)",
    responses=COMMON_ERRORS,
)
async def deposit(
    request: DepositRequest,
    current_user: User = Depends(get_current_user),
    gateway_service: PaymentGatewayService = Depends(get_gateway_service),
):
    result = gateway_service.deposit_instructions(current_user, request.coin, request.method)
    return success_response(data=DepositResponse(**result), message=result["message"])

@router.get(
    "/topup-history",
    response_model=StandardResponse[List[TopupHistoryItem]],
    summary="충전 내역",
)
async def get_topup_history(
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    history = await wallet_service.get_topup_history(current_user.id)
    return success_response(data=[TopupHistoryItem(**item) for item in history])

# --- 결제 레코드 ---

@router.post(
    "",
    response_model=StandardResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="결제 레코드 생성 (PENDING)",
    responses=COMMON_ERRORS,
)
async def create_payment(
    request: CreatePaymentRequest,
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payment = await wallet_service.create_payment(
        current_user, request.game_player_id, request.coin, request.currency, request.payment_method
    )
    return success_response(data=PaymentResponse.model_validate(payment), message="Payment created")

@router.post(
    "/{payment_id}/process",
    response_model=StandardResponse[PaymentResponse],
    summary="결제 완료 처리 (관리자)",
    responses=COMMON_ERRORS,
)
async def process_payment(
    request: ProcessPaymentRequest,
    payment_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payment = await wallet_service.process_payment(payment_id, request.transaction_id)
    return success_response(data=PaymentResponse.model_validate(payment), message="Payment processed")

@router.post(
    "/{payment_id}/refund",
    response_model=StandardResponse[PaymentResponse],
    summary="결제 환불 (관리자)",
    responses=COMMON_ERRORS,
)
async def refund_payment(
    request: RefundRequest,
    payment_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payment = await wallet_service.refund_payment(payment_id, request.reason)
    return success_response(data=PaymentResponse.model_validate(payment), message="Payment refunded")

@router.get("/user/{user_id}", response_model=StandardResponse[List[PaymentResponse]], summary="사용자 결제 내역")
async def get_user_payments(
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    _ensure_self_or_admin(current_user, user_id)
    payments = await wallet_service.get_user_payments(user_id)
    return success_response(data=[PaymentResponse.model_validate(p) for p in payments])

@router.get(
    "/game-player/{game_player_id}",
    response_model=StandardResponse[List[PaymentResponse]],
    summary="게임 플레이어 결제 내역 (관리자)",
)
async def get_game_player_payments(
    game_player_id: int = Path(..., ge=1),
    _: User = Depends(require_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payments = await wallet_service.get_game_player_payments(game_player_id)
    return success_response(data=[PaymentResponse.model_validate(p) for p in payments])

@router.get(
    "/status/{payment_status}",
    response_model=StandardResponse[List[PaymentResponse]],
    summary="상태별 결제 조회 (관리자)",
)
async def get_payments_by_status(
    payment_status: str,
    _: User = Depends(require_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payments = await wallet_service.get_payments_by_status(payment_status)
    return success_response(data=[PaymentResponse.model_validate(p) for p in payments])

@router.get(
    "/date-range",
    response_model=StandardResponse[List[PaymentResponse]],
    summary="기간별 결제 조회 (관리자)",
)
async def get_payments_by_date_range(
    start: datetime = Query(..., description="ISO 8601 시작 시각"),
    end: datetime = Query(..., description="ISO 8601 종료 시각"),
    _: User = Depends(require_admin),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payments = await wallet_service.get_payments_by_date_range(start, end)
    return success_response(data=[PaymentResponse.model_validate(p) for p in payments])

# --- 고용 ---

@router.post(
    "/hire",
    response_model=StandardResponse[HireResponse],
    status_code=status.HTTP_201_CREATED,
    summary="게임 플레이어 고용",
    responses=COMMON_ERRORS,
)
async def hire_player(
    request: HireRequest,
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    result = await hire_service.hire(current_user, request.game_player_id, request.hours, request.message)
    return success_response(
        data=HireResponse(
            order=OrderResponse.model_validate(result["order"]),
            payment=PaymentResponse.model_validate(result["payment"]),
            balance=result["balance"],
        ),
        message="Thuê người chơi thành công",
    )

@router.get("/hire/history", response_model=StandardResponse[List[PaymentResponse]], summary="내 고용 내역")
async def get_hire_history(
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    hires = await wallet_service.get_hire_history(current_user.id)
    return success_response(data=[PaymentResponse.model_validate(p) for p in hires])

@router.get("/hire/orders/mine", response_model=StandardResponse[List[OrderResponse]], summary="내가 고용한 주문")
async def get_my_orders(
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    orders = await hire_service.get_renter_orders(current_user.id)
    return success_response(data=[OrderResponse.model_validate(o) for o in orders])

@router.get("/hire/orders/incoming", response_model=StandardResponse[List[OrderResponse]], summary="나에게 들어온 주문")
async def get_incoming_orders(
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    orders = await hire_service.get_player_orders(current_user.id)
    return success_response(data=[OrderResponse.model_validate(o) for o in orders])

@router.post("/hire/orders/{order_id}/confirm", response_model=StandardResponse[OrderResponse], summary="주문 수락")
async def confirm_hire(
    order_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    order = await hire_service.confirm_hire(current_user, order_id)
    return success_response(data=OrderResponse.model_validate(order), message="Order confirmed")

@router.post("/hire/orders/{order_id}/reject", response_model=StandardResponse[OrderResponse], summary="주문 거절")
async def reject_hire(
    order_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    order = await hire_service.reject_hire(current_user, order_id)
    return success_response(data=OrderResponse.model_validate(order), message="Order rejected")

@router.post("/hire/orders/{order_id}/cancel", response_model=StandardResponse[OrderResponse], summary="주문 취소")
async def cancel_hire(
    order_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    order = await hire_service.cancel_hire(current_user, order_id)
    return success_response(data=OrderResponse.model_validate(order), message="Order canceled")

@router.post("/hire/orders/{order_id}/complete", response_model=StandardResponse[OrderResponse], summary="주문 종료")
async def complete_hire(
    order_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    order = await hire_service.complete_hire(current_user, order_id)
    return success_response(data=OrderResponse.model_validate(order), message="Order completed")

@router.get(
    "/hire/player/{player_id}",
    response_model=StandardResponse[List[PaymentResponse]],
    summary="플레이어(사용자 ID)가 받은 고용 내역",
)
async def get_player_hire_history(
    player_id: int = Path(..., ge=1),
    _: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    hires = await wallet_service.get_player_hire_history(player_id)
    return success_response(data=[PaymentResponse.model_validate(p) for p in hires])

@router.post(
    "/hire/{payment_id}/review",
    response_model=StandardResponse[ReviewResponse],
    summary="고용 종료 후 리뷰 작성",
    responses={**COMMON_ERRORS, status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "결제자만 리뷰 가능"}},
)
async def review_player(
    request: ReviewRequest,
    payment_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    hire_service: HireService = Depends(get_hire_service),
):
    review = await hire_service.review_player(current_user, payment_id, request.rating, request.comment)
    return success_response(data=_review_dto(review), message="Đánh giá thành công")

@router.get(
    "/hire/player/{player_id}/reviews",
    response_model=StandardResponse[PlayerReviewsResponse],
    summary="플레이어(사용자 ID) 리뷰 목록",
)
async def get_player_reviews(
    player_id: int = Path(..., ge=1),
    hire_service: HireService = Depends(get_hire_service),
):
    result = await hire_service.get_player_reviews(player_id)
    return success_response(data=PlayerReviewsResponse(
        reviews=[_review_dto(r) for r in result["reviews"]],
        average_rating=result["average_rating"],
        review_count=result["review_count"],
    ))

# --- VNPay ---

@router.post(
    "/vnpay/create",
    response_model=StandardResponse[VnPayCreateResponse],
    summary="VNPay 결제 URL 생성",
    responses=COMMON_ERRORS,
)
async def create_vnpay_payment(
    request: Request,
    amount: int = Query(..., description="결제 금액 (VND)"),
    order_info: str = Query(..., alias="orderInfo", min_length=1, max_length=255),
    user_id: int = Query(..., alias="userId", ge=1),
    gateway_service: PaymentGatewayService = Depends(get_gateway_service),
):
    result = await gateway_service.create_vnpay_payment(user_id, amount, order_info, get_client_ip(request))
    return success_response(data=VnPayCreateResponse(**result))

@router.get("/vnpay-return", summary="VNPay 결제 결과 리다이렉트", response_class=HTMLResponse)
async def vnpay_return(
    request: Request,
    gateway_service: PaymentGatewayService = Depends(get_gateway_service),
):
    result = await gateway_service.handle_vnpay_return(dict(request.query_params))
    if result.success:
        return HTMLResponse(_receipt_html(result.payment.coin, result.payment.vnp_txn_ref or ""))
    return PlainTextResponse("Thanh toán thất bại!")

@router.get("/vnpay-ipn", response_model=VnPayIpnResponse, summary="VNPay IPN (서버 간 통지)")
async def vnpay_ipn(
    request: Request,
    gateway_service: PaymentGatewayService = Depends(get_gateway_service),
):
    result = await gateway_service.handle_vnpay_ipn(dict(request.query_params))
    return JSONResponse(content=result)

@router.get("/{payment_id}", response_model=StandardResponse[PaymentResponse], summary="결제 단건 조회")
async def get_payment(
    payment_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    wallet_service: WalletService = Depends(get_wallet_service),
):
    payment = await wallet_service.get_payment(payment_id)
    if payment.user_id != current_user.id and payment.player_id != current_user.id:
        _ensure_self_or_admin(current_user, payment.user_id)
    return success_response(data=PaymentResponse.model_validate(payment))
