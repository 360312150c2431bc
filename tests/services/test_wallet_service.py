import pytest
from unittest.mock import AsyncMock

from sqlalchemy import select

from playerduo.core.exceptions import (
    InsufficientFundsError, InvalidAmountError, PermissionDeniedError, BusinessLogicError,
    InvalidInputError, InvalidPaymentStatusError, NotFoundError,
)
from playerduo.models.domain.notification import Notification
from playerduo.models.domain.payment import Payment
from playerduo.models.domain.user import UserBlock
from playerduo.models.enums import PaymentStatus, PaymentType, PaymentMethod, Role

async def _payments(db_session, **filters):
    stmt = select(Payment).filter_by(**filters).order_by(Payment.id)
    return (await db_session.execute(stmt)).scalars().all()

# --- 충전 ---

@pytest.mark.asyncio
async def test_top_up_credits_balance_and_records_payment(services, make_user, db_session):
    user = await make_user(coin=10)

    result = await services.wallet.top_up(user, 50)

    assert result["message"] == "Nạp coin thành công"
    assert result["balance"] == 60
    assert user.coin == 60
    payments = await _payments(db_session, user_id=user.id)
    assert len(payments) == 1
    assert payments[0].type == PaymentType.TOPUP
    assert payments[0].status == PaymentStatus.COMPLETED
    assert payments[0].id == result["payment_id"]

    notifications = (await db_session.execute(select(Notification))).scalars().all()
    assert [(n.user_id, n.type, n.title) for n in notifications] == [(user.id, "topup", "Nạp xu thành công!")]

@pytest.mark.asyncio
@pytest.mark.parametrize("coin", [0, -5, True, "10", 1.5])
async def test_top_up_rejects_invalid_amount(services, make_user, coin):
    user = await make_user(coin=0)
    with pytest.raises(InvalidAmountError) as exc_info:
        await services.wallet.top_up(user, coin)
    assert exc_info.value.message == "Số coin phải lớn hơn 0"
    assert user.coin == 0

# --- 출금 ---

@pytest.mark.asyncio
async def test_withdraw_requires_player_role(services, make_user):
    user = await make_user(coin=100)
    with pytest.raises(PermissionDeniedError):
        await services.wallet.withdraw(user, 10)

@pytest.mark.asyncio
async def test_withdraw_debits_player(services, make_user, db_session):
    player = await make_user(coin=100, roles=[Role.USER, Role.PLAYER])

    result = await services.wallet.withdraw(player, 40)

    assert result["balance"] == 60
    payments = await _payments(db_session, user_id=player.id, type=PaymentType.WITHDRAW)
    assert len(payments) == 1
    assert payments[0].coin == 40

@pytest.mark.asyncio
async def test_withdraw_insufficient_funds_leaves_balance(services, make_user, db_session):
    player = await make_user(coin=30, roles=[Role.PLAYER])

    with pytest.raises(InsufficientFundsError) as exc_info:
        await services.wallet.withdraw(player, 31)

    assert exc_info.value.current_balance == 30
    assert player.coin == 30
    assert await _payments(db_session, user_id=player.id) == []

# --- 후원 ---

@pytest.mark.asyncio
async def test_donate_moves_coin_to_owner(services, make_user, make_game_player, db_session):
    donor = await make_user(coin=100)
    owner = await make_user(coin=5)
    game_player = await make_game_player(owner)

    result = await services.wallet.donate(donor, game_player.id, 30, "gg")

    assert result["message"] == "Donate thành công"
    assert donor.coin == 70
    assert owner.coin == 35
    payment = (await _payments(db_session, type=PaymentType.DONATE))[0]
    assert payment.user_id == donor.id
    assert payment.player_id == owner.id
    assert payment.game_player_id == game_player.id
    assert payment.description == "gg"

    recipients = (await db_session.execute(select(Notification.user_id).order_by(Notification.id))).scalars().all()
    assert recipients == [owner.id, donor.id]

@pytest.mark.asyncio
async def test_donate_to_self_is_rejected(services, make_user, make_game_player):
    owner = await make_user(coin=100)
    game_player = await make_game_player(owner)

    with pytest.raises(BusinessLogicError) as exc_info:
        await services.wallet.donate(owner, game_player.id, 10)
    assert exc_info.value.message == "Không thể donate cho chính mình"

@pytest.mark.asyncio
async def test_donate_blocked_by_owner(services, make_user, make_game_player, db_session):
    donor = await make_user(coin=100)
    owner = await make_user()
    game_player = await make_game_player(owner)
    db_session.add(UserBlock(blocker_id=owner.id, blocked_id=donor.id))
    await db_session.commit()

    with pytest.raises(BusinessLogicError) as exc_info:
        await services.wallet.donate(donor, game_player.id, 10)
    assert exc_info.value.message == "Bạn đã bị người chơi này chặn"
    assert donor.coin == 100

@pytest.mark.asyncio
async def test_donate_unknown_game_player(services, make_user):
    donor = await make_user(coin=100)
    with pytest.raises(NotFoundError):
        await services.wallet.donate(donor, 9999, 10)

# --- 결제 레코드 ---

@pytest.mark.asyncio
async def test_create_and_process_payment(services, make_user, make_game_player):
    payer = await make_user(coin=100)
    owner = await make_user()
    game_player = await make_game_player(owner)

    payment = await services.wallet.create_payment(payer, game_player.id, 25)
    assert payment.status == PaymentStatus.PENDING
    assert payer.coin == 100

    processed = await services.wallet.process_payment(payment.id, "EXT-1")
    assert processed.status == PaymentStatus.COMPLETED
    assert processed.transaction_id == "EXT-1"

    with pytest.raises(InvalidPaymentStatusError):
        await services.wallet.process_payment(payment.id, "EXT-2")

@pytest.mark.asyncio
async def test_refund_completed_donate_reverses_balances(services, make_user, make_game_player, db_session):
    donor = await make_user(coin=100)
    owner = await make_user()
    game_player = await make_game_player(owner)
    result = await services.wallet.donate(donor, game_player.id, 40)

    refunded = await services.wallet.refund_payment(result["payment_id"], "Nhầm người nhận")

    assert refunded.status == PaymentStatus.REFUNDED
    assert donor.coin == 100
    assert owner.coin == 0
    refunds = await _payments(db_session, type=PaymentType.REFUND)
    assert len(refunds) == 1
    assert refunds[0].transaction_id == str(refunded.id)
    assert refunds[0].description == "Nhầm người nhận"

@pytest.mark.asyncio
async def test_refund_completed_donate_fails_when_receiver_spent_coin(services, make_user, make_game_player):
    donor = await make_user(coin=100)
    owner = await make_user(roles=[Role.PLAYER])
    game_player = await make_game_player(owner)
    result = await services.wallet.donate(donor, game_player.id, 40)
    await services.wallet.withdraw(owner, 40)

    with pytest.raises(InsufficientFundsError):
        await services.wallet.refund_payment(result["payment_id"], "late refund")

@pytest.mark.asyncio
async def test_refund_twice_is_rejected(services, make_user, make_game_player):
    donor = await make_user(coin=100)
    owner = await make_user()
    game_player = await make_game_player(owner)
    result = await services.wallet.donate(donor, game_player.id, 10)
    await services.wallet.refund_payment(result["payment_id"], "first")

    with pytest.raises(InvalidPaymentStatusError):
        await services.wallet.refund_payment(result["payment_id"], "second")
    assert donor.coin == 100

@pytest.mark.asyncio
async def test_refund_recorded_payment_without_escrow_is_rejected(services, make_user, make_game_player, db_session):
    payer = await make_user(coin=0)
    owner = await make_user()
    game_player = await make_game_player(owner)
    payment = await services.wallet.create_payment(payer, game_player.id, 500)

    with pytest.raises(InvalidPaymentStatusError):
        await services.wallet.refund_payment(payment.id, "no escrow")

    assert payer.coin == 0
    assert payment.status == PaymentStatus.PENDING
    assert await _payments(db_session, type=PaymentType.REFUND) == []

@pytest.mark.asyncio
async def test_refund_processed_payment_does_not_debit_receiver(services, make_user, make_game_player, db_session):
    payer = await make_user(coin=0)
    owner = await make_user(coin=500)
    game_player = await make_game_player(owner)
    payment = await services.wallet.create_payment(payer, game_player.id, 500)
    await services.wallet.process_payment(payment.id, "EXT-9")

    with pytest.raises(InvalidPaymentStatusError):
        await services.wallet.refund_payment(payment.id, "external payment")

    assert payer.coin == 0
    assert owner.coin == 500
    assert payment.status == PaymentStatus.COMPLETED
    assert await _payments(db_session, type=PaymentType.REFUND) == []

@pytest.mark.asyncio
async def test_refund_topup_is_not_allowed(services, make_user):
    user = await make_user()
    result = await services.wallet.top_up(user, 10)
    with pytest.raises(InvalidPaymentStatusError):
        await services.wallet.refund_payment(result["payment_id"], "no")

# --- 조회 ---

@pytest.mark.asyncio
async def test_get_payments_by_status_is_case_insensitive(services, make_user):
    user = await make_user()
    await services.wallet.top_up(user, 10)

    payments = await services.wallet.get_payments_by_status("completed")
    assert len(payments) == 1

    with pytest.raises(InvalidInputError):
        await services.wallet.get_payments_by_status("unknown")

@pytest.mark.asyncio
async def test_get_topup_history_display_fields(services, make_user, db_session):
    user = await make_user()
    await services.wallet.top_up(user, 10)
    db_session.add(Payment(
        user_id=user.id, coin=20000, currency="VND", status=PaymentStatus.PENDING,
        payment_method=PaymentMethod.VNPAY, type=PaymentType.TOPUP, vnp_txn_ref="111",
    ))
    db_session.add(Payment(
        user_id=user.id, coin=5000, currency="VND", status=PaymentStatus.CANCELED,
        payment_method=PaymentMethod.VNPAY, type=PaymentType.TOPUP, vnp_txn_ref="222",
    ))
    await db_session.flush()

    history = await services.wallet.get_topup_history(user.id)

    display = {item["status"]: (item["status_text"], item["status_color"]) for item in history}
    assert display[PaymentStatus.COMPLETED] == ("Thành công", "#4CAF50")
    assert display[PaymentStatus.PENDING] == ("Đang xử lý", "#FFA500")
    assert display[PaymentStatus.CANCELED] == ("CANCELED", "#9E9E9E")

# --- 잔액 캐시 ---

@pytest.mark.asyncio
async def test_get_balance_uses_cache(services, make_user):
    user = await make_user(coin=42)
    redis = AsyncMock()
    redis.get.return_value = "77"
    services.wallet.redis = redis

    assert await services.wallet.get_balance(user.id) == 77
    redis.set.assert_not_awaited()

@pytest.mark.asyncio
async def test_get_balance_populates_cache_and_invalidates_on_credit(services, make_user):
    user = await make_user(coin=42)
    redis = AsyncMock()
    redis.get.return_value = None
    services.wallet.redis = redis

    assert await services.wallet.get_balance(user.id) == 42
    redis.set.assert_awaited_once()
    assert redis.set.await_args.args == (f"wallet:balance:{user.id}", 42)

    await services.wallet.credit(user.id, 8)
    redis.delete.assert_awaited_once_with(f"wallet:balance:{user.id}")
