"""
애플리케이션 공통 예외 클래스 정의
"""
from typing import Optional, Any

class AppException(Exception):
    """애플리케이션 기본 예외 클래스"""
    def __init__(self, message: str = "An application error occurred", status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class NotFoundError(AppException):
    """리소스를 찾을 수 없을 때 발생하는 범용 예외"""
    def __init__(self, resource_type: str = "Resource", identifier: Any = None, message: Optional[str] = None, status_code: int = 404):
        if message is None:
            if identifier is not None:
                message = f"{resource_type} with identifier '{identifier}' not found."
            else:
                message = f"{resource_type} not found."
        super().__init__(message, status_code)
        self.resource_type = resource_type
        self.identifier = identifier

class AuthenticationError(AppException):
    """인증 실패 예외"""
    def __init__(self, message: str = "Authentication failed", status_code: int = 401):
        super().__init__(message, status_code)

class InvalidCredentialsError(AuthenticationError):
    """잘못된 자격 증명 예외"""
    def __init__(self, message: str = "Invalid username or password", status_code: int = 401):
        super().__init__(message, status_code)

class AuthorizationError(AppException):
    """권한 없음 예외"""
    def __init__(self, message: str = "Permission denied", status_code: int = 403):
        super().__init__(message, status_code)

class PermissionDeniedError(AuthorizationError):
    """특정 작업에 대한 권한 부족 예외"""
    def __init__(self, permission: str, message: Optional[str] = None, status_code: int = 403):
        if message is None:
            message = f"Permission denied for action requiring: {permission}"
        super().__init__(message, status_code)
        self.permission = permission

class InvalidInputError(AppException):
    """잘못된 요청 값 (400)"""
    def __init__(self, message: str = "Invalid input provided", status_code: int = 400):
        super().__init__(message, status_code)

class DatabaseError(AppException):
    def __init__(self, message: str = "A database error occurred", status_code: int = 500):
        super().__init__(message, status_code)

class ValidationError(AppException):
    """서비스 계층 유효성 검사 실패 예외"""
    def __init__(self, message: str = "Validation Error", detail: Any = None, status_code: int = 400):
        super().__init__(message, status_code)
        self.detail = detail

class ConflictError(AppException):
    """리소스 충돌 예외 (예: 고유해야 하는 값이 이미 존재)"""
    def __init__(self, resource_type: str = "Resource", identifier: Optional[str] = None, message: Optional[str] = None, status_code: int = 409):
        if message is None:
            if identifier:
                message = f"{resource_type} with identifier '{identifier}' already exists or causes a conflict."
            else:
                message = f"A conflict occurred with the requested {resource_type.lower()}.".capitalize()
        super().__init__(message, status_code)
        self.resource_type = resource_type
        self.identifier = identifier

class BusinessLogicError(AppException):
    """비즈니스 규칙 위반 예외 (400)"""
    def __init__(self, message: str = "Business rule violation", status_code: int = 400):
        super().__init__(message, status_code)

# Wallet / Payment related errors
class InsufficientFundsError(AppException):
    """잔액 부족 예외"""
    def __init__(self, user_id: Any, requested_amount: Any, current_balance: Any, status_code: int = 400):
        message = (
            f"Insufficient balance for user {user_id}. "
            f"Requested: {requested_amount}, Available: {current_balance}."
        )
        super().__init__(message, status_code)
        self.user_id = user_id
        self.requested_amount = requested_amount
        self.current_balance = current_balance

class InvalidAmountError(AppException):
    """유효하지 않은 금액 예외 (예: 0 또는 음수 금액)"""
    def __init__(self, amount: Any, message: Optional[str] = None, status_code: int = 400):
        if message is None:
            message = f"Invalid amount provided: {amount}. Amount must be positive."
        super().__init__(message, status_code)
        self.amount = amount

class InvalidPaymentStatusError(AppException):
    """잘못된 결제 상태 예외 (예: 이미 환불된 결제 환불 시도)"""
    def __init__(self, payment_id: Any, current_status: Any, expected_status: Optional[str] = None, status_code: int = 400):
        current = getattr(current_status, "value", current_status)
        if expected_status:
            message = f"Invalid status for payment {payment_id}. Current: {current}, Expected: {expected_status}."
        else:
            message = f"Invalid status for payment {payment_id}: {current}."
        super().__init__(message, status_code)
        self.payment_id = payment_id
        self.current_status = current

class DuplicateTransactionError(AppException):
    """중복 거래 예외 (동일한 외부 거래 참조 사용)"""
    def __init__(self, reference_id: str, status_code: int = 409):
        message = f"Duplicate transaction: reference {reference_id} already exists."
        super().__init__(message, status_code)
        self.reference_id = reference_id

class PaymentGatewayError(AppException):
    """결제 게이트웨이 연동 오류"""
    def __init__(self, message: str = "Payment gateway error", status_code: int = 400):
        super().__init__(message, status_code)

class InvalidSignatureError(PaymentGatewayError):
    """게이트웨이 콜백 서명 불일치"""
    def __init__(self, message: str = "Invalid checksum", status_code: int = 400):
        super().__init__(message, status_code)

class ServiceUnavailableException(AppException):
    def __init__(self, message: str = "Service temporarily unavailable", status_code: int = 503):
        super().__init__(message, status_code)
