from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship

from playerduo.db.database import Base
from playerduo.models.enums import MomentStatus
from playerduo.utils.datetime_utils import utcnow

class Moment(Base):
    """플레이어가 게시하는 '모먼트' 게시물"""
    __tablename__ = "moments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_player_id = Column(Integer, ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    status = Column(SQLEnum(MomentStatus), nullable=False, default=MomentStatus.ACTIVE)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    game_player = relationship("GamePlayer", lazy="selectin")
    images = relationship(
        "MomentImage",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="MomentImage.display_order",
    )

    def __repr__(self):
        return f"<Moment {self.id}: player={self.game_player_id} ({self.status})>"

class MomentImage(Base):
    __tablename__ = "moment_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    moment_id = Column(Integer, ForeignKey("moments.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)
    display_order = Column(Integer, nullable=False)
