"""
도메인 열거형 정의
"""
from enum import Enum

class Role(str, Enum):
    USER = "USER"
    PLAYER = "PLAYER"
    ADMIN = "ADMIN"

class PaymentStatus(str, Enum):
    """결제 상태"""
    PENDING = "PENDING"          # 처리 중
    COMPLETED = "COMPLETED"      # 완료
    FAILED = "FAILED"            # 실패
    REFUNDED = "REFUNDED"        # 환불됨
    CANCELED = "CANCELED"        # 취소됨

class PaymentType(str, Enum):
    """결제(원장) 유형"""
    TOPUP = "TOPUP"
    WITHDRAW = "WITHDRAW"
    HIRE = "HIRE"
    DONATE = "DONATE"
    REFUND = "REFUND"

class PaymentMethod(str, Enum):
    TOPUP = "TOPUP"
    WITHDRAW = "WITHDRAW"
    COIN = "COIN"
    DONATE = "DONATE"
    VNPAY = "VNPAY"
    MOMO = "MOMO"
    ZALOPAY = "ZALOPAY"
    BANK_TRANSFER = "BANK_TRANSFER"

# QR 코드로 안내하는 전자지갑 결제 수단
QR_PAYMENT_METHODS = (PaymentMethod.MOMO, PaymentMethod.VNPAY, PaymentMethod.ZALOPAY)

class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"

class GamePlayerStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    HIRED = "HIRED"
    OFFLINE = "OFFLINE"

class GameStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

class MomentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    HIDDEN = "HIDDEN"
    DELETED = "DELETED"

class ReportStatus(str, Enum):
    PENDING = "PENDING"          # 접수됨
    PROCESSING = "PROCESSING"    # 처리 중
    RESOLVED = "RESOLVED"        # 처리 완료
    REJECTED = "REJECTED"        # 반려

ACTIVE_REPORT_STATUSES = (ReportStatus.PENDING, ReportStatus.PROCESSING)

class NotificationType(str, Enum):
    TOPUP = "topup"
    TOPUP_SUCCESS = "topup_success"
    TOPUP_FAILED = "topup_failed"
    WITHDRAW = "withdraw"
    DONATE = "donate"
    HIRE = "hire"
    REFUND = "refund"
    MOMENT = "moment"
    REPORT = "report"
    SYSTEM = "system"
