from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text

from playerduo.db.database import Base
from playerduo.utils.datetime_utils import utcnow

class Notification(Base):
    """사용자 알림"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, index=True)
    action_url = Column(String(500))
    reference_id = Column(Integer)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<Notification {self.id}: user={self.user_id} type={self.type}>"
