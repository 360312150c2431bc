"""
게임 및 게임 플레이어(동행자) 도메인 모델
"""
from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, ForeignKey, Text, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship

from playerduo.db.database import Base
from playerduo.db.types import StringListType
from playerduo.models.enums import GamePlayerStatus, GameStatus
from playerduo.utils.datetime_utils import utcnow

class Game(Base):
    """게임 모델"""
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    category = Column(String(50))
    platform = Column(String(50))
    status = Column(String(20), nullable=False, default=GameStatus.ACTIVE.value)
    image_url = Column(String(500))
    website_url = Column(String(500))
    requirements = Column(Text)
    has_roles = Column(Boolean, nullable=False, default=False)
    available_roles = Column(StringListType, nullable=False, default=list)
    available_ranks = Column(StringListType, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Game {self.id}: {self.name}>"

class GamePlayer(Base):
    """게임별 플레이어 프로필 (고용 가능한 동행자)"""
    __tablename__ = "game_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, index=True)

    username = Column(String(100), nullable=False)
    rank = Column(String(50))
    role = Column(String(50))
    server = Column(String(50))
    description = Column(Text)
    price_per_hour = Column(BigInteger, nullable=False, default=0)
    status = Column(SQLEnum(GamePlayerStatus), nullable=False, default=GamePlayerStatus.AVAILABLE)

    hired_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    hire_date = Column(DateTime)
    return_date = Column(DateTime)
    total_hours = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", foreign_keys=[user_id], lazy="selectin")
    game = relationship("Game", lazy="selectin")

    def __repr__(self):
        return f"<GamePlayer {self.id}: {self.username} ({self.status})>"

class PlayerFollow(Base):
    __tablename__ = "player_follows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_player_id = Column(Integer, ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("follower_id", "game_player_id", name="uq_player_follows_pair"),
    )
