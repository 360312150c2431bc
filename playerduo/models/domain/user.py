"""
사용자 관련 도메인 모델
"""
from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, ForeignKey, Text, CheckConstraint, UniqueConstraint

from playerduo.db.database import Base
from playerduo.db.types import StringListType
from playerduo.models.enums import Role
from playerduo.utils.datetime_utils import utcnow

class User(Base):
    """사용자 모델. coin 컬럼이 지갑 잔액이다."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    full_name = Column(String(100))
    phone_number = Column(String(20))
    address = Column(String(255))
    bio = Column(Text)
    gender = Column(String(20))
    avatar_url = Column(String(500))
    cover_image_url = Column(String(500))

    coin = Column(BigInteger, nullable=False, default=0)
    roles = Column(StringListType, nullable=False, default=lambda: [Role.USER.value])

    enabled = Column(Boolean, nullable=False, default=True)
    account_non_locked = Column(Boolean, nullable=False, default=True)
    is_online = Column(Boolean, nullable=False, default=False)
    last_active_at = Column(DateTime)
    device_token = Column(String(500))

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("coin >= 0", name="ck_users_coin_non_negative"),
    )

    def has_role(self, role: Role) -> bool:
        return role.value in (self.roles or [])

    def __repr__(self):
        return f"<User {self.id}: {self.username} coin={self.coin}>"

class PasswordResetToken(Base):
    """비밀번호 재설정 일회용 토큰"""
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(100), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

class UserBlock(Base):
    __tablename__ = "user_blocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    blocker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blocked_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blocks_pair"),
    )
