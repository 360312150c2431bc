"""
외부 결제 게이트웨이 서비스
VNPay 결제 생성 / 콜백 정산 및 QR, 계좌이체 입금 안내
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Mapping, Optional, Dict, Any

from playerduo.core.config import settings
from playerduo.core.exceptions import InvalidInputError, InvalidSignatureError, NotFoundError, PaymentGatewayError
from playerduo.models.domain.payment import Payment
from playerduo.models.domain.user import User
from playerduo.models.enums import (
    PaymentStatus, PaymentType, PaymentMethod, NotificationType, QR_PAYMENT_METHODS,
)
from playerduo.repositories.payment_repository import PaymentRepository
from playerduo.repositories.user_repository import UserRepository
from playerduo.services.notification.notification_service import NotificationService
from playerduo.services.payment.qr_code import generate_payment_qr_code
from playerduo.services.payment.vnpay_service import VnPayService
from playerduo.services.wallet.wallet_service import WalletService, validate_amount
from playerduo.utils.datetime_utils import epoch_millis

logger = logging.getLogger(__name__)

# VNPay IPN 응답 코드
IPN_SUCCESS = ("00", "Confirm Success")
IPN_ORDER_NOT_FOUND = ("01", "Order not found")
IPN_ALREADY_CONFIRMED = ("02", "Order already confirmed")
IPN_INVALID_AMOUNT = ("04", "Invalid amount")
IPN_INVALID_SIGNATURE = ("97", "Invalid Checksum")

TXN_REF_ATTEMPTS = 5

@dataclass
class ReconcileResult:
    """콜백 정산 결과"""
    payment: Payment
    success: bool
    already_processed: bool = False
    amount_mismatch: bool = False

class PaymentGatewayService:

    def __init__(
        self,
        vnpay: VnPayService,
        payment_repo: PaymentRepository,
        user_repo: UserRepository,
        wallet_service: WalletService,
        notification_service: NotificationService,
    ):
        self.vnpay = vnpay
        self.payment_repo = payment_repo
        self.user_repo = user_repo
        self.wallet_service = wallet_service
        self.notification_service = notification_service

    # --- 입금 안내 ---

    def deposit_instructions(self, user: User, coin: Any, method: str) -> Dict[str, Any]:
        """
        입금 방법별 안내 정보 생성 (잔액 변경 없음)

        Raises:
            InvalidInputError: coin < 1 또는 지원하지 않는 결제 수단
        """
        if isinstance(coin, bool) or not isinstance(coin, int) or coin < 1:
            raise InvalidInputError("Số coin nạp tối thiểu là 1")

        method_name = (method or "").strip().upper()
        transaction_id = f"TXN_{epoch_millis()}"
        try:
            payment_method = PaymentMethod(method_name)
        except ValueError:
            raise InvalidInputError("Phương thức thanh toán không hợp lệ!")

        response: Dict[str, Any] = {"method": payment_method, "coin": coin, "transaction_id": transaction_id}
        if payment_method in QR_PAYMENT_METHODS:
            response["qr_code"] = generate_payment_qr_code(method_name, coin, user.id, transaction_id)
            response["message"] = f"Quét mã QR bằng ứng dụng {method_name} để thanh toán"
        elif payment_method == PaymentMethod.BANK_TRANSFER:
            response.update({
                "bank_account": settings.BANK_ACCOUNT,
                "bank_name": settings.BANK_NAME,
                "bank_owner": settings.BANK_OWNER,
                "transfer_content": f"NAPTIEN_{user.id}_{transaction_id}",
                "message": "Vui lòng chuyển khoản đúng nội dung để được cộng coin tự động.",
            })
        else:
            raise InvalidInputError("Phương thức thanh toán không hợp lệ!")

        logger.info(f"Deposit instructions issued for user {user.id}: {method_name} {coin} ({transaction_id})")
        return response

    # --- VNPay ---

    async def create_vnpay_payment(self, user_id: int, amount: int, order_info: str, ip_addr: str) -> Dict[str, Any]:
        """PENDING TOPUP 결제 생성 후 서명된 결제 URL 반환"""
        amount = validate_amount(amount)
        user = await self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        txn_ref = await self._new_txn_ref()
        payment_url = self.vnpay.create_payment_url(amount, order_info, ip_addr, txn_ref)
        payment = await self.payment_repo.add(Payment(
            user_id=user.id,
            coin=amount,
            currency="VND",
            status=PaymentStatus.PENDING,
            payment_method=PaymentMethod.VNPAY,
            type=PaymentType.TOPUP,
            vnp_txn_ref=txn_ref,
            description=order_info,
        ))
        logger.info(f"VNPay payment {payment.id} created for user {user.id} (txn_ref={txn_ref}, amount={amount})")
        return {"payment_url": payment_url, "txn_ref": txn_ref, "payment_id": payment.id}

    async def _new_txn_ref(self) -> str:
        """밀리초 타임스탬프 + 3자리 난수. 같은 밀리초에 생성돼도 겹치지 않도록 기존 값과 비교 후 재시도"""
        for _ in range(TXN_REF_ATTEMPTS):
            txn_ref = f"{epoch_millis()}{secrets.randbelow(1000):03d}"
            if await self.payment_repo.get_by_vnp_txn_ref(txn_ref) is None:
                return txn_ref
            logger.warning(f"VNPay txn_ref collision on {txn_ref}, retrying")
        raise PaymentGatewayError("Lỗi tạo link thanh toán: trùng mã giao dịch, vui lòng thử lại")

    async def reconcile(self, payment: Payment, params: Mapping[str, str]) -> ReconcileResult:
        """
        검증된 콜백으로 결제 상태 확정.
        PENDING 상태에서 조건부로 한 번만 전이하므로 중복 콜백은 잔액을 변경하지 않는다.
        """
        if payment.status != PaymentStatus.PENDING:
            return ReconcileResult(payment, payment.status == PaymentStatus.COMPLETED, already_processed=True)

        if VnPayService.is_success(params):
            expected_amount = str(payment.coin * 100)
            if params.get("vnp_Amount") != expected_amount:
                logger.warning(
                    f"VNPay amount mismatch for payment {payment.id}: got {params.get('vnp_Amount')}, expected {expected_amount}"
                )
                return ReconcileResult(payment, False, amount_mismatch=True)

            transaction_no = params.get("vnp_TransactionNo") or None
            updated = await self.payment_repo.transition_status(
                payment, PaymentStatus.PENDING, PaymentStatus.COMPLETED, transaction_id=transaction_no
            )
            if not updated:
                return ReconcileResult(payment, payment.status == PaymentStatus.COMPLETED, already_processed=True)

            await self.wallet_service.credit(payment.user_id, payment.coin)
            await self.notification_service.create_notification(
                payment.user_id,
                "Nạp tiền thành công",
                f"Bạn đã nạp thành công {payment.coin} VND qua VNPay.",
                NotificationType.TOPUP_SUCCESS.value,
                reference_id=payment.id,
            )
            return ReconcileResult(payment, True)

        updated = await self.payment_repo.transition_status(payment, PaymentStatus.PENDING, PaymentStatus.FAILED)
        if not updated:
            return ReconcileResult(payment, payment.status == PaymentStatus.COMPLETED, already_processed=True)
        logger.info(f"VNPay payment {payment.id} failed with response code {params.get('vnp_ResponseCode')}")
        await self.notification_service.create_notification(
            payment.user_id,
            "Nạp tiền thất bại",
            "Giao dịch VNPay thất bại. Vui lòng thử lại hoặc liên hệ hỗ trợ.",
            NotificationType.TOPUP_FAILED.value,
            reference_id=payment.id,
        )
        return ReconcileResult(payment, False)

    async def _find_payment(self, params: Mapping[str, str]) -> Optional[Payment]:
        txn_ref = params.get("vnp_TxnRef")
        if not txn_ref:
            return None
        return await self.payment_repo.get_by_vnp_txn_ref(txn_ref, for_update=True)

    async def handle_vnpay_return(self, params: Mapping[str, str]) -> ReconcileResult:
        """
        브라우저 리다이렉트 콜백 처리

        Raises:
            InvalidSignatureError: 서명 불일치
            PaymentGatewayError: 알 수 없는 거래 또는 금액 불일치
        """
        if not self.vnpay.verify_callback(params):
            raise InvalidSignatureError("Sai checksum, giao dịch không hợp lệ!")
        payment = await self._find_payment(params)
        if payment is None:
            raise PaymentGatewayError("Không tìm thấy đơn hàng!")
        result = await self.reconcile(payment, params)
        if result.amount_mismatch:
            raise PaymentGatewayError("Số tiền giao dịch không hợp lệ!")
        return result

    async def handle_vnpay_ipn(self, params: Mapping[str, str]) -> Dict[str, str]:
        """서버 간 IPN 처리. VNPay 응답 계약 {RspCode, Message} 반환"""
        if not self.vnpay.verify_callback(params):
            code, message = IPN_INVALID_SIGNATURE
        else:
            payment = await self._find_payment(params)
            if payment is None:
                code, message = IPN_ORDER_NOT_FOUND
            else:
                result = await self.reconcile(payment, params)
                if result.amount_mismatch:
                    code, message = IPN_INVALID_AMOUNT
                elif result.already_processed:
                    code, message = IPN_ALREADY_CONFIRMED
                else:
                    code, message = IPN_SUCCESS
        logger.info(f"VNPay IPN for txn_ref={params.get('vnp_TxnRef')}: RspCode={code}")
        return {"RspCode": code, "Message": message}
