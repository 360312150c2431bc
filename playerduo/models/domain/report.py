from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum as SQLEnum

from playerduo.db.database import Base
from playerduo.models.enums import ReportStatus
from playerduo.utils.datetime_utils import utcnow

class Report(Base):
    """플레이어 신고"""
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reported_player_id = Column(Integer, ForeignKey("game_players.id", ondelete="CASCADE"), nullable=False, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(String(255), nullable=False)
    description = Column(Text)
    video = Column(String(500))
    status = Column(SQLEnum(ReportStatus), nullable=False, default=ReportStatus.PENDING, index=True)
    resolution = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<Report {self.id}: player={self.reported_player_id} ({self.status})>"
