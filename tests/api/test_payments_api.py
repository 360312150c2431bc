from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select, update

from playerduo.models.domain.payment import Payment
from playerduo.models.enums import PaymentStatus, PaymentType, Role
from playerduo.services.payment.vnpay_service import VnPayService, get_vnpay_service
from playerduo.utils.datetime_utils import utcnow

def _signed(params):
    vnpay = get_vnpay_service()
    params = dict(params)
    params["vnp_SecureHash"] = vnpay.sign(VnPayService.build_hash_data(params))
    return params

def _callback_params(txn_ref: str, amount_vnd: int, response_code: str = "00"):
    return _signed({
        "vnp_Amount": str(amount_vnd * 100),
        "vnp_TxnRef": txn_ref,
        "vnp_ResponseCode": response_code,
        "vnp_TransactionStatus": response_code,
        "vnp_TransactionNo": "14089999",
        "vnp_OrderInfo": "Nap tien vao tai khoan",
    })

# --- 지갑 ---

@pytest.mark.asyncio
async def test_topup_and_balance(client: AsyncClient, make_user, auth_headers):
    user = await make_user(coin=5)
    headers = auth_headers(user)

    response = await client.post("/api/payments/topup", json={"coin": 100}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Nạp coin thành công"
    assert body["data"]["balance"] == 105

    balance = await client.get("/api/payments/wallet-balance", headers=headers)
    assert balance.json()["data"] == {"user_id": user.id, "balance": 105}

    history = await client.get("/api/payments/topup-history", headers=headers)
    items = history.json()["data"]
    assert len(items) == 1
    assert items[0]["status_text"] == "Thành công"
    assert items[0]["status_color"] == "#4CAF50"

@pytest.mark.asyncio
async def test_topup_invalid_amount(client: AsyncClient, make_user, auth_headers, fetch_user):
    user = await make_user(coin=5)

    response = await client.post("/api/payments/topup", json={"coin": 0}, headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_amount"
    assert response.json()["message"] == "Số coin phải lớn hơn 0"
    assert (await fetch_user(user.id)).coin == 5

@pytest.mark.asyncio
async def test_topup_requires_authentication(client: AsyncClient):
    response = await client.post("/api/payments/topup", json={"coin": 10})
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_withdraw_requires_player_role(client: AsyncClient, make_user, auth_headers):
    user = await make_user(coin=50)

    response = await client.post("/api/payments/withdraw", json={"coin": 10}, headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["error_code"] == "permission_denied"
    assert response.json()["message"] == "Permission denied for action requiring: PLAYER"

@pytest.mark.asyncio
async def test_withdraw_insufficient_funds(client: AsyncClient, make_user, auth_headers, fetch_user):
    player = await make_user(coin=50, roles=[Role.USER, Role.PLAYER])

    response = await client.post("/api/payments/withdraw", json={"coin": 51}, headers=auth_headers(player))

    assert response.status_code == 400
    assert response.json()["error_code"] == "insufficient_funds"
    assert (await fetch_user(player.id)).coin == 50

@pytest.mark.asyncio
async def test_donate(client: AsyncClient, make_user, make_game_player, auth_headers, fetch_user):
    donor = await make_user(coin=100)
    owner = await make_user()
    game_player = await make_game_player(owner)

    response = await client.post(
        "/api/payments/donate",
        json={"game_player_id": game_player.id, "coin": 25, "message": "gg wp"},
        headers=auth_headers(donor),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Donate thành công"
    assert (await fetch_user(donor.id)).coin == 75
    assert (await fetch_user(owner.id)).coin == 25

@pytest.mark.asyncio
async def test_deposit_instructions(client: AsyncClient, make_user, auth_headers):
    user = await make_user()
    headers = auth_headers(user)

    qr = await client.post("/api/payments/deposit", json={"coin": 50, "method": "momo"}, headers=headers)
    assert qr.status_code == 200
    assert qr.json()["data"]["method"] == "MOMO"
    assert qr.json()["data"]["qr_code"].startswith("data:image/png;base64,")

    bank = await client.post("/api/payments/deposit", json={"coin": 50, "method": "BANK_TRANSFER"}, headers=headers)
    assert bank.json()["data"]["transfer_content"].startswith(f"NAPTIEN_{user.id}_TXN_")

    invalid = await client.post("/api/payments/deposit", json={"coin": 50, "method": "CASH"}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Phương thức thanh toán không hợp lệ!"

# --- 고용 흐름 ---

@pytest.mark.asyncio
async def test_hire_confirm_review_flow(client: AsyncClient, make_user, make_game_player, auth_headers, fetch_user, db_session_factory):
    renter = await make_user(username="renter", coin=500)
    owner = await make_user(username="owner")
    game_player = await make_game_player(owner, price_per_hour=100)

    hire = await client.post(
        "/api/payments/hire",
        json={"game_player_id": game_player.id, "hours": 2, "message": "leo rank"},
        headers=auth_headers(renter),
    )
    assert hire.status_code == 201
    data = hire.json()["data"]
    assert data["balance"] == 300
    assert data["payment"]["status"] == "PENDING"
    assert data["order"]["status"] == "PENDING"
    order_id, payment_id = data["order"]["id"], data["payment"]["id"]

    incoming = await client.get("/api/payments/hire/orders/incoming", headers=auth_headers(owner))
    assert [o["id"] for o in incoming.json()["data"]] == [order_id]

    forbidden = await client.post(f"/api/payments/hire/orders/{order_id}/confirm", headers=auth_headers(renter))
    assert forbidden.status_code == 403

    confirm = await client.post(f"/api/payments/hire/orders/{order_id}/confirm", headers=auth_headers(owner))
    assert confirm.status_code == 200
    assert confirm.json()["data"]["status"] == "CONFIRMED"
    assert (await fetch_user(owner.id)).coin == 200

    early = await client.post(f"/api/payments/hire/{payment_id}/review", json={"rating": 5}, headers=auth_headers(renter))
    assert early.status_code == 400

    async with db_session_factory() as session:
        await session.execute(
            update(Payment).where(Payment.id == payment_id).values(end_time=utcnow() - timedelta(minutes=5))
        )
        await session.commit()

    review = await client.post(
        f"/api/payments/hire/{payment_id}/review",
        json={"rating": 5, "comment": "Chơi hay"},
        headers=auth_headers(renter),
    )
    assert review.status_code == 200
    assert review.json()["data"]["reviewer_username"] == "renter"

    reviews = await client.get(f"/api/payments/hire/player/{owner.id}/reviews")
    assert reviews.json()["data"]["review_count"] == 1
    assert reviews.json()["data"]["average_rating"] == 5.0

    history = await client.get("/api/payments/hire/history", headers=auth_headers(renter))
    assert [p["id"] for p in history.json()["data"]] == [payment_id]

@pytest.mark.asyncio
async def test_hire_self_is_rejected(client: AsyncClient, make_user, make_game_player, auth_headers):
    owner = await make_user(coin=1000)
    game_player = await make_game_player(owner)

    response = await client.post(
        "/api/payments/hire", json={"game_player_id": game_player.id, "hours": 1}, headers=auth_headers(owner)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Không thể thuê chính mình"

@pytest.mark.asyncio
async def test_cancel_pending_hire_refunds(client: AsyncClient, make_user, make_game_player, auth_headers, fetch_user):
    renter = await make_user(coin=500)
    game_player = await make_game_player(await make_user(), price_per_hour=100)
    hire = await client.post(
        "/api/payments/hire", json={"game_player_id": game_player.id, "hours": 1}, headers=auth_headers(renter)
    )
    order_id = hire.json()["data"]["order"]["id"]

    response = await client.post(f"/api/payments/hire/orders/{order_id}/cancel", headers=auth_headers(renter))

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CANCELED"
    assert (await fetch_user(renter.id)).coin == 500

# --- 결제 레코드 (관리자) ---

@pytest.mark.asyncio
async def test_admin_payment_queries_and_refund(client: AsyncClient, make_user, make_game_player, auth_headers, fetch_user):
    admin = await make_user(roles=[Role.ADMIN])
    donor = await make_user(coin=100)
    owner = await make_user()
    game_player = await make_game_player(owner)
    donate = await client.post(
        "/api/payments/donate", json={"game_player_id": game_player.id, "coin": 40}, headers=auth_headers(donor)
    )
    payment_id = donate.json()["data"]["payment_id"]

    forbidden = await client.get("/api/payments/status/completed", headers=auth_headers(donor))
    assert forbidden.status_code == 403

    by_status = await client.get("/api/payments/status/completed", headers=auth_headers(admin))
    assert [p["id"] for p in by_status.json()["data"]] == [payment_id]

    by_player = await client.get(f"/api/payments/game-player/{game_player.id}", headers=auth_headers(admin))
    assert len(by_player.json()["data"]) == 1

    refund = await client.post(
        f"/api/payments/{payment_id}/refund", json={"reason": "Nhầm"}, headers=auth_headers(admin)
    )
    assert refund.status_code == 200
    assert refund.json()["data"]["status"] == "REFUNDED"
    assert (await fetch_user(donor.id)).coin == 100
    assert (await fetch_user(owner.id)).coin == 0

    again = await client.post(
        f"/api/payments/{payment_id}/refund", json={"reason": "Nhầm"}, headers=auth_headers(admin)
    )
    assert again.status_code == 400
    assert again.json()["error_code"] == "invalid_payment_status"

@pytest.mark.asyncio
async def test_admin_refund_of_recorded_payment_moves_no_coin(client: AsyncClient, make_user, make_game_player, auth_headers, fetch_user):
    admin = await make_user(roles=[Role.ADMIN])
    payer = await make_user(coin=0)
    owner = await make_user(coin=500)
    game_player = await make_game_player(owner)
    created = await client.post(
        "/api/payments", json={"game_player_id": game_player.id, "coin": 500}, headers=auth_headers(payer)
    )
    assert created.status_code == 201
    payment_id = created.json()["data"]["id"]

    pending_refund = await client.post(
        f"/api/payments/{payment_id}/refund", json={"reason": "Hoàn tiền"}, headers=auth_headers(admin)
    )
    assert pending_refund.status_code == 400
    assert pending_refund.json()["error_code"] == "invalid_payment_status"

    processed = await client.post(
        f"/api/payments/{payment_id}/process", json={"transaction_id": "EXT-77"}, headers=auth_headers(admin)
    )
    assert processed.json()["data"]["status"] == "COMPLETED"

    completed_refund = await client.post(
        f"/api/payments/{payment_id}/refund", json={"reason": "Hoàn tiền"}, headers=auth_headers(admin)
    )
    assert completed_refund.status_code == 400
    assert (await fetch_user(payer.id)).coin == 0
    assert (await fetch_user(owner.id)).coin == 500

@pytest.mark.asyncio
async def test_payment_visibility(client: AsyncClient, make_user, auth_headers):
    user = await make_user()
    other = await make_user()
    topup = await client.post("/api/payments/topup", json={"coin": 10}, headers=auth_headers(user))
    payment_id = topup.json()["data"]["payment_id"]

    own = await client.get(f"/api/payments/{payment_id}", headers=auth_headers(user))
    assert own.status_code == 200
    assert own.json()["data"]["type"] == "TOPUP"

    assert (await client.get(f"/api/payments/{payment_id}", headers=auth_headers(other))).status_code == 403
    assert (await client.get(f"/api/payments/user/{user.id}", headers=auth_headers(other))).status_code == 403
    assert (await client.get("/api/payments/999", headers=auth_headers(user))).status_code == 404

# --- VNPay ---

@pytest.mark.asyncio
async def test_vnpay_create_and_return(client: AsyncClient, make_user, fetch_user):
    user = await make_user()

    created = await client.post(
        "/api/payments/vnpay/create",
        params={"amount": 20000, "orderInfo": "Nap tien vao tai khoan", "userId": user.id},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert created.status_code == 200
    data = created.json()["data"]
    assert "vnp_IpAddr=203.0.113.7" in data["payment_url"]
    assert "vnp_Amount=2000000" in data["payment_url"]

    params = _callback_params(data["txn_ref"], 20000)
    response = await client.get("/api/payments/vnpay-return", params=params)

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Thanh toán thành công!" in response.text
    assert "20000 xu" in response.text
    assert (await fetch_user(user.id)).coin == 20000

    replay = await client.get("/api/payments/vnpay-return", params=params)
    assert replay.status_code == 200
    assert (await fetch_user(user.id)).coin == 20000

@pytest.mark.asyncio
async def test_vnpay_return_failure_and_bad_checksum(client: AsyncClient, make_user, db_session_factory):
    user = await make_user()
    created = await client.post(
        "/api/payments/vnpay/create", params={"amount": 10000, "orderInfo": "Nap tien", "userId": user.id}
    )
    txn_ref = created.json()["data"]["txn_ref"]

    tampered = _callback_params(txn_ref, 10000)
    tampered["vnp_Amount"] = "100"
    bad = await client.get("/api/payments/vnpay-return", params=tampered)
    assert bad.status_code == 400
    assert bad.json()["message"] == "Sai checksum, giao dịch không hợp lệ!"

    failed = await client.get("/api/payments/vnpay-return", params=_callback_params(txn_ref, 10000, "24"))
    assert failed.status_code == 200
    assert failed.text == "Thanh toán thất bại!"

    async with db_session_factory() as session:
        payment = (await session.execute(select(Payment).where(Payment.vnp_txn_ref == txn_ref))).scalar_one()
    assert payment.status == PaymentStatus.FAILED
    assert payment.type == PaymentType.TOPUP

@pytest.mark.asyncio
async def test_vnpay_ipn_contract(client: AsyncClient, make_user, fetch_user):
    user = await make_user()
    created = await client.post(
        "/api/payments/vnpay/create", params={"amount": 30000, "orderInfo": "Nap tien", "userId": user.id}
    )
    txn_ref = created.json()["data"]["txn_ref"]

    unknown = await client.get("/api/payments/vnpay-ipn", params=_callback_params("nope", 30000))
    assert unknown.json() == {"RspCode": "01", "Message": "Order not found"}

    ok = await client.get("/api/payments/vnpay-ipn", params=_callback_params(txn_ref, 30000))
    assert ok.json() == {"RspCode": "00", "Message": "Confirm Success"}
    assert (await fetch_user(user.id)).coin == 30000

    duplicate = await client.get("/api/payments/vnpay-ipn", params=_callback_params(txn_ref, 30000))
    assert duplicate.json()["RspCode"] == "02"
    assert (await fetch_user(user.id)).coin == 30000

@pytest.mark.asyncio
async def test_vnpay_non_ascii_checksum_is_rejected(client: AsyncClient, make_user, fetch_user):
    user = await make_user()
    created = await client.post(
        "/api/payments/vnpay/create", params={"amount": 10000, "orderInfo": "Nap tien", "userId": user.id}
    )
    params = _callback_params(created.json()["data"]["txn_ref"], 10000)
    params["vnp_SecureHash"] = "é" * 128

    ipn = await client.get("/api/payments/vnpay-ipn", params=params)
    assert ipn.status_code == 200
    assert ipn.json() == {"RspCode": "97", "Message": "Invalid Checksum"}

    returned = await client.get("/api/payments/vnpay-return", params=params)
    assert returned.status_code == 400
    assert returned.json()["message"] == "Sai checksum, giao dịch không hợp lệ!"
    assert (await fetch_user(user.id)).coin == 0
