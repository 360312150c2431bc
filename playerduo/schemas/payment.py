from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from playerduo.models.enums import PaymentStatus, PaymentType, PaymentMethod, OrderStatus

# --- Payment Schemas ---

class PaymentResponse(BaseModel):
    """ 결제(원장) 응답 스키마 """
    id: int
    user_id: int
    game_player_id: Optional[int] = None
    player_id: Optional[int] = None
    coin: int
    currency: str
    status: PaymentStatus
    payment_method: PaymentMethod
    type: PaymentType
    transaction_id: Optional[str] = None
    vnp_txn_ref: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CreatePaymentRequest(BaseModel):
    game_player_id: int
    coin: int = Field(..., gt=0)
    currency: str = Field("COIN", max_length=10)
    payment_method: PaymentMethod = PaymentMethod.COIN

class ProcessPaymentRequest(BaseModel):
    transaction_id: str = Field(..., min_length=1, max_length=100)

class RefundRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)

# --- Wallet Schemas ---

class CoinRequest(BaseModel):
    """ 충전 / 출금 요청 """
    coin: int = Field(..., description="코인 수량 (양수)")

class DonateRequest(BaseModel):
    game_player_id: int
    coin: int
    message: Optional[str] = Field(None, max_length=500)

class WalletActionResponse(BaseModel):
    message: str
    coin: int
    balance: int
    payment_id: int

class BalanceResponse(BaseModel):
    user_id: int
    balance: int

class DepositRequest(BaseModel):
    coin: int
    method: str

class DepositResponse(BaseModel):
    method: PaymentMethod
    coin: int
    transaction_id: str
    message: Optional[str] = None
    qr_code: Optional[str] = None
    bank_account: Optional[str] = None
    bank_name: Optional[str] = None
    bank_owner: Optional[str] = None
    transfer_content: Optional[str] = None

class TopupHistoryItem(BaseModel):
    id: int
    coin: int
    payment_method: PaymentMethod
    status: PaymentStatus
    status_text: str
    status_color: str
    created_at: datetime

# --- Hire / Order Schemas ---

class HireRequest(BaseModel):
    game_player_id: int
    hours: int = Field(..., ge=1, le=24)
    message: Optional[str] = Field(None, max_length=500)

class OrderResponse(BaseModel):
    id: int
    payment_id: int
    renter_id: int
    game_player_id: int
    hours: int
    total_coin: int
    message: Optional[str] = None
    status: OrderStatus
    start_time: datetime
    end_time: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class HireResponse(BaseModel):
    order: OrderResponse
    payment: PaymentResponse
    balance: int

# --- Review Schemas ---

class ReviewRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)

class ReviewResponse(BaseModel):
    id: int
    game_player_id: int
    user_id: int
    reviewer_username: Optional[str] = None
    order_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime

class PlayerReviewsResponse(BaseModel):
    reviews: List[ReviewResponse]
    average_rating: float
    review_count: int

# --- VNPay Schemas ---

class VnPayCreateResponse(BaseModel):
    payment_url: str
    txn_ref: str
    payment_id: int

class VnPayIpnResponse(BaseModel):
    """VNPay IPN 응답 계약 (필드명 고정)"""
    RspCode: str
    Message: str
