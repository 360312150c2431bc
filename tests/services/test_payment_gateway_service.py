import pytest
from sqlalchemy import select

from playerduo.core.exceptions import InvalidInputError, InvalidSignatureError, PaymentGatewayError, NotFoundError
from playerduo.models.domain.notification import Notification
from playerduo.models.domain.payment import Payment
from playerduo.models.enums import PaymentMethod, PaymentStatus, PaymentType
from playerduo.services.payment import gateway_service
from playerduo.services.payment.vnpay_service import VnPayService

def _callback(vnpay: VnPayService, txn_ref: str, amount_vnd: int, response_code: str = "00", **extra):
    params = {
        "vnp_Amount": str(amount_vnd * 100),
        "vnp_TxnRef": txn_ref,
        "vnp_ResponseCode": response_code,
        "vnp_TransactionStatus": response_code,
        "vnp_TransactionNo": "14080001",
        "vnp_TmnCode": vnpay.tmn_code,
        "vnp_BankCode": "NCB",
    }
    params.update(extra)
    params["vnp_SecureHash"] = vnpay.sign(VnPayService.build_hash_data(params))
    return params

@pytest.fixture
async def pending_topup(services, make_user):
    user = await make_user(coin=0)
    created = await services.gateway.create_vnpay_payment(user.id, 50000, "Nap tien", "127.0.0.1")
    return user, created

# --- 입금 안내 ---

@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["momo", "VNPAY", " zalopay "])
async def test_deposit_instructions_qr_methods(services, make_user, method):
    user = await make_user()

    result = services.gateway.deposit_instructions(user, 100, method)

    assert result["coin"] == 100
    assert result["transaction_id"].startswith("TXN_")
    assert result["qr_code"].startswith("data:image/png;base64,")
    assert "qr_code" in result and "bank_account" not in result

@pytest.mark.asyncio
async def test_deposit_instructions_bank_transfer(services, make_user):
    user = await make_user()

    result = services.gateway.deposit_instructions(user, 200, "bank_transfer")

    assert result["method"] == PaymentMethod.BANK_TRANSFER
    assert result["transfer_content"] == f"NAPTIEN_{user.id}_{result['transaction_id']}"
    assert "qr_code" not in result

@pytest.mark.asyncio
@pytest.mark.parametrize("coin, method", [(0, "MOMO"), (10, "PAYPAL"), (10, "COIN"), (10, "")])
async def test_deposit_instructions_invalid(services, make_user, db_session, coin, method):
    user = await make_user(coin=5)

    with pytest.raises(InvalidInputError):
        services.gateway.deposit_instructions(user, coin, method)

    assert (await db_session.execute(select(Payment))).scalars().all() == []

# --- VNPay 결제 생성 ---

@pytest.mark.asyncio
async def test_create_vnpay_payment_records_pending_topup(services, pending_topup, db_session):
    user, created = pending_topup

    payment = await db_session.get(Payment, created["payment_id"])
    assert payment.status == PaymentStatus.PENDING
    assert payment.type == PaymentType.TOPUP
    assert payment.payment_method == PaymentMethod.VNPAY
    assert payment.currency == "VND"
    assert payment.vnp_txn_ref == created["txn_ref"]
    assert "vnp_Amount=5000000" in created["payment_url"]
    assert f"vnp_TxnRef={created['txn_ref']}" in created["payment_url"]
    assert user.coin == 0

@pytest.mark.asyncio
async def test_create_vnpay_payment_unknown_user(services):
    with pytest.raises(NotFoundError):
        await services.gateway.create_vnpay_payment(12345, 1000, "Nap tien", "127.0.0.1")

@pytest.mark.asyncio
async def test_create_vnpay_payment_same_millisecond_gets_distinct_txn_refs(services, make_user, monkeypatch):
    user = await make_user()
    monkeypatch.setattr(gateway_service, "epoch_millis", lambda: 1714534200000)

    first = await services.gateway.create_vnpay_payment(user.id, 10000, "Nap tien", "127.0.0.1")
    second = await services.gateway.create_vnpay_payment(user.id, 10000, "Nap tien", "127.0.0.1")

    assert first["txn_ref"] != second["txn_ref"]
    assert first["txn_ref"].startswith("1714534200000")
    assert len(first["txn_ref"]) == 16

@pytest.mark.asyncio
async def test_create_vnpay_payment_retries_on_txn_ref_collision(services, make_user, monkeypatch):
    user = await make_user()
    monkeypatch.setattr(gateway_service, "epoch_millis", lambda: 1714534200000)
    suffixes = iter([5, 5, 5, 7])
    monkeypatch.setattr(gateway_service.secrets, "randbelow", lambda _: next(suffixes))

    first = await services.gateway.create_vnpay_payment(user.id, 10000, "Nap tien", "127.0.0.1")
    second = await services.gateway.create_vnpay_payment(user.id, 10000, "Nap tien", "127.0.0.1")

    assert first["txn_ref"] == "1714534200000005"
    assert second["txn_ref"] == "1714534200000007"

@pytest.mark.asyncio
async def test_create_vnpay_payment_gives_up_after_repeated_collisions(services, make_user, monkeypatch, db_session):
    user = await make_user()
    monkeypatch.setattr(gateway_service, "epoch_millis", lambda: 1714534200000)
    monkeypatch.setattr(gateway_service.secrets, "randbelow", lambda _: 5)
    await services.gateway.create_vnpay_payment(user.id, 10000, "Nap tien", "127.0.0.1")

    with pytest.raises(PaymentGatewayError):
        await services.gateway.create_vnpay_payment(user.id, 10000, "Nap tien", "127.0.0.1")

    assert len((await db_session.execute(select(Payment))).scalars().all()) == 1

# --- 콜백 정산 ---

@pytest.mark.asyncio
async def test_vnpay_return_success_credits_once(services, vnpay, pending_topup, db_session):
    user, created = pending_topup
    params = _callback(vnpay, created["txn_ref"], 50000)

    result = await services.gateway.handle_vnpay_return(params)

    assert result.success is True
    assert result.payment.status == PaymentStatus.COMPLETED
    assert result.payment.transaction_id == "14080001"
    assert user.coin == 50000

    again = await services.gateway.handle_vnpay_return(params)
    assert again.success is True
    assert again.already_processed is True
    assert user.coin == 50000

    types = (await db_session.execute(select(Notification.type))).scalars().all()
    assert types == ["topup_success"]

@pytest.mark.asyncio
async def test_vnpay_return_failure_marks_failed(services, vnpay, pending_topup):
    user, created = pending_topup

    result = await services.gateway.handle_vnpay_return(_callback(vnpay, created["txn_ref"], 50000, response_code="24"))

    assert result.success is False
    assert result.payment.status == PaymentStatus.FAILED
    assert user.coin == 0

@pytest.mark.asyncio
async def test_vnpay_return_bad_signature(services, vnpay, pending_topup):
    _, created = pending_topup
    params = _callback(vnpay, created["txn_ref"], 50000)
    params["vnp_SecureHash"] = "0" * 128

    with pytest.raises(InvalidSignatureError):
        await services.gateway.handle_vnpay_return(params)

@pytest.mark.asyncio
async def test_vnpay_return_unknown_txn(services, vnpay, pending_topup):
    with pytest.raises(PaymentGatewayError):
        await services.gateway.handle_vnpay_return(_callback(vnpay, "does-not-exist", 50000))

@pytest.mark.asyncio
async def test_vnpay_return_amount_mismatch_keeps_pending(services, vnpay, pending_topup):
    user, created = pending_topup

    with pytest.raises(PaymentGatewayError):
        await services.gateway.handle_vnpay_return(_callback(vnpay, created["txn_ref"], 1000))

    payment = await services.wallet.get_payment(created["payment_id"])
    assert payment.status == PaymentStatus.PENDING
    assert user.coin == 0

# --- IPN ---

@pytest.mark.asyncio
async def test_ipn_response_codes(services, vnpay, pending_topup):
    user, created = pending_topup
    txn_ref = created["txn_ref"]

    bad = _callback(vnpay, txn_ref, 50000)
    bad["vnp_SecureHash"] = "f" * 128
    assert await services.gateway.handle_vnpay_ipn(bad) == {"RspCode": "97", "Message": "Invalid Checksum"}

    assert (await services.gateway.handle_vnpay_ipn(_callback(vnpay, "missing", 50000)))["RspCode"] == "01"
    assert (await services.gateway.handle_vnpay_ipn(_callback(vnpay, txn_ref, 999)))["RspCode"] == "04"

    assert await services.gateway.handle_vnpay_ipn(_callback(vnpay, txn_ref, 50000)) == {
        "RspCode": "00", "Message": "Confirm Success",
    }
    assert user.coin == 50000

    assert (await services.gateway.handle_vnpay_ipn(_callback(vnpay, txn_ref, 50000)))["RspCode"] == "02"
    assert user.coin == 50000

@pytest.mark.asyncio
async def test_ipn_after_failed_payment_reports_already_confirmed(services, vnpay, pending_topup):
    _, created = pending_topup

    first = await services.gateway.handle_vnpay_ipn(_callback(vnpay, created["txn_ref"], 50000, response_code="24"))
    assert first["RspCode"] == "00"

    second = await services.gateway.handle_vnpay_ipn(_callback(vnpay, created["txn_ref"], 50000))
    assert second["RspCode"] == "02"

@pytest.mark.asyncio
async def test_duplicate_success_ipn_credits_once(services, vnpay, pending_topup, db_session):
    user, created = pending_topup
    params = _callback(vnpay, created["txn_ref"], 50000)

    first = await services.gateway.handle_vnpay_ipn(params)
    second = await services.gateway.handle_vnpay_ipn(dict(params))

    assert first == {"RspCode": "00", "Message": "Confirm Success"}
    assert second == {"RspCode": "02", "Message": "Order already confirmed"}
    assert user.coin == 50000
    payment = await services.wallet.get_payment(created["payment_id"])
    assert payment.status == PaymentStatus.COMPLETED
    types = (await db_session.execute(select(Notification.type))).scalars().all()
    assert types == ["topup_success"]

@pytest.mark.asyncio
async def test_ipn_non_ascii_signature_is_invalid_checksum(services, vnpay, pending_topup):
    user, created = pending_topup
    params = _callback(vnpay, created["txn_ref"], 50000)
    params["vnp_SecureHash"] = "é" * 128

    assert await services.gateway.handle_vnpay_ipn(params) == {"RspCode": "97", "Message": "Invalid Checksum"}
    assert user.coin == 0
