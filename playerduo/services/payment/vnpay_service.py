"""
VNPay 결제 게이트웨이 연동
결제 URL 서명 생성 및 콜백(return / IPN) 서명 검증
"""
import hashlib
import hmac
import logging
from datetime import datetime, timedelta
from typing import Dict, Mapping, Optional
from urllib.parse import quote_plus

from playerduo.core.config import settings
from playerduo.utils.datetime_utils import vietnam_now

logger = logging.getLogger(__name__)

VNPAY_DATE_FORMAT = "%Y%m%d%H%M%S"
SECURE_HASH_FIELDS = ("vnp_SecureHash", "vnp_SecureHashType")
SUCCESS_CODE = "00"

class VnPayService:
    """VNPay 결제 URL 생성 및 서명 검증"""

    def __init__(
        self,
        tmn_code: str,
        hash_secret: str,
        pay_url: str,
        return_url: str,
        version: str = "2.1.0",
        locale: str = "vn",
        expire_minutes: int = 15,
    ):
        self.tmn_code = tmn_code
        self.hash_secret = hash_secret
        self.pay_url = pay_url
        self.return_url = return_url
        self.version = version
        self.locale = locale
        self.expire_minutes = expire_minutes

    @staticmethod
    def _sorted_fields(params: Mapping[str, object]):
        # 빈 값은 서명 및 쿼리에서 제외
        for key in sorted(params):
            value = params[key]
            if value is None or str(value) == "":
                continue
            yield key, str(value)

    @classmethod
    def build_hash_data(cls, params: Mapping[str, object]) -> str:
        """서명 대상 문자열: key=urlencode(value) 를 키 정렬 순서로 & 연결"""
        return "&".join(f"{key}={quote_plus(value)}" for key, value in cls._sorted_fields(params))

    @classmethod
    def build_query(cls, params: Mapping[str, object]) -> str:
        return "&".join(
            f"{quote_plus(key)}={quote_plus(value)}" for key, value in cls._sorted_fields(params)
        )

    def sign(self, data: str) -> str:
        """HMAC-SHA512 (소문자 hex)"""
        return hmac.new(
            self.hash_secret.encode("utf-8"),
            data.encode("utf-8"),
            hashlib.sha512,
        ).hexdigest()

    def build_payment_params(
        self,
        amount: int,
        order_info: str,
        ip_addr: str,
        txn_ref: str,
        now: Optional[datetime] = None,
    ) -> Dict[str, str]:
        created = now or vietnam_now()
        expires = created + timedelta(minutes=self.expire_minutes)
        return {
            "vnp_Version": self.version,
            "vnp_Command": "pay",
            "vnp_TmnCode": self.tmn_code,
            "vnp_Amount": str(int(amount) * 100),
            "vnp_CurrCode": "VND",
            "vnp_TxnRef": txn_ref,
            "vnp_OrderInfo": order_info,
            "vnp_OrderType": "other",
            "vnp_Locale": self.locale,
            "vnp_ReturnUrl": self.return_url,
            "vnp_IpAddr": ip_addr,
            "vnp_CreateDate": created.strftime(VNPAY_DATE_FORMAT),
            "vnp_ExpireDate": expires.strftime(VNPAY_DATE_FORMAT),
        }

    def create_payment_url(
        self,
        amount: int,
        order_info: str,
        ip_addr: str,
        txn_ref: str,
        now: Optional[datetime] = None,
    ) -> str:
        """
        서명된 VNPay 결제 URL 생성

        Args:
            amount: 결제 금액 (VND). VNPay 에는 100 을 곱해 전달한다.
            order_info: 주문 설명
            ip_addr: 고객 IP
            txn_ref: 가맹점 거래 참조 (고유)
            now: 생성 시각 (GMT+7, 테스트용)
        """
        params = self.build_payment_params(amount, order_info, ip_addr, txn_ref, now)
        secure_hash = self.sign(self.build_hash_data(params))
        url = f"{self.pay_url}?{self.build_query(params)}&vnp_SecureHash={secure_hash}"
        logger.info(f"VNPay payment URL created for txn_ref={txn_ref}, amount={amount}")
        return url

    def verify_callback(self, params: Mapping[str, object]) -> bool:
        """콜백 파라미터의 vnp_SecureHash 검증"""
        received = params.get("vnp_SecureHash")
        if not received:
            logger.warning("VNPay callback without vnp_SecureHash")
            return False

        fields = {key: value for key, value in params.items() if key not in SECURE_HASH_FIELDS}
        expected = self.sign(self.build_hash_data(fields))
        valid = hmac.compare_digest(expected.lower().encode("utf-8"), str(received).lower().encode("utf-8"))
        if not valid:
            logger.warning(f"VNPay signature mismatch for txn_ref={params.get('vnp_TxnRef')}")
        return valid

    @staticmethod
    def is_success(params: Mapping[str, object]) -> bool:
        """응답 코드(및 거래 상태가 있으면 거래 상태)가 모두 00 인지"""
        if params.get("vnp_ResponseCode") != SUCCESS_CODE:
            return False
        transaction_status = params.get("vnp_TransactionStatus")
        return transaction_status is None or transaction_status == SUCCESS_CODE

def get_vnpay_service() -> VnPayService:
    return VnPayService(
        tmn_code=settings.VNPAY_TMN_CODE,
        hash_secret=settings.VNPAY_HASH_SECRET,
        pay_url=settings.VNPAY_PAY_URL,
        return_url=settings.VNPAY_RETURN_URL,
        version=settings.VNPAY_VERSION,
        locale=settings.VNPAY_LOCALE,
        expire_minutes=settings.VNPAY_EXPIRE_MINUTES,
    )
