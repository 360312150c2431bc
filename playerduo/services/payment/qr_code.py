"""
입금 안내용 QR 코드 생성
"""
import logging

import segno

logger = logging.getLogger(__name__)

def build_qr_payload(method: str, coin: int, user_id: int, transaction_id: str) -> str:
    return f"{method}|{coin}|{user_id}|{transaction_id}"

def generate_payment_qr_code(method: str, coin: int, user_id: int, transaction_id: str) -> str:
    """결제 정보를 담은 QR 코드를 PNG data URI 로 반환"""
    qr = segno.make(build_qr_payload(method, coin, user_id, transaction_id), error="m")
    logger.debug(f"QR code generated for transaction {transaction_id} ({method})")
    return qr.png_data_uri(scale=6, border=2)
