"""
결제(원장), 고용 주문, 리뷰 도메인 모델
"""
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey, Text, Enum as SQLEnum, Index, CheckConstraint
from sqlalchemy.orm import relationship

from playerduo.db.database import Base
from playerduo.models.enums import PaymentStatus, PaymentType, PaymentMethod, OrderStatus
from playerduo.utils.datetime_utils import utcnow

class Payment(Base):
    """
    코인 원장 레코드.
    user_id는 지불한 사용자, player_id는 코인을 받는 사용자(고용/후원 대상)이다.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_player_id = Column(Integer, ForeignKey("game_players.id", ondelete="SET NULL"), index=True)
    player_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)

    coin = Column(BigInteger, nullable=False)
    currency = Column(String(10), nullable=False, default="COIN")
    status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    type = Column(SQLEnum(PaymentType), nullable=False)

    transaction_id = Column(String(100))
    vnp_txn_ref = Column(String(100), unique=True)
    description = Column(Text)

    start_time = Column(DateTime)
    end_time = Column(DateTime)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("coin > 0", name="ck_payments_coin_positive"),
        Index("ix_payments_user_type", "user_id", "type"),
    )

    def __repr__(self):
        return f"<Payment {self.id}: {self.type} {self.coin} ({self.status})>"

class Order(Base):
    """고용 주문. 결제 1건당 주문 1건."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, unique=True)
    renter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_player_id = Column(Integer, ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False, index=True)
    hours = Column(Integer, nullable=False)
    total_coin = Column(BigInteger, nullable=False)
    message = Column(Text)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Order {self.id}: payment={self.payment_id} ({self.status})>"

class PlayerReview(Base):
    """고용 종료 후 작성하는 플레이어 리뷰 (주문당 1건)"""
    __tablename__ = "player_reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_player_id = Column(Integer, ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    reviewer = relationship("User", lazy="selectin")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_player_reviews_rating_range"),
    )
