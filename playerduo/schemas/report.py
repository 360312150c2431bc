from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from playerduo.models.enums import ReportStatus

class ReportCreate(BaseModel):
    reported_player_id: int
    reason: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    video: Optional[str] = Field(None, max_length=500)

class ReportStatusUpdate(BaseModel):
    """ 관리자 처리 상태 변경 """
    status: ReportStatus
    resolution: Optional[str] = None

class ReportResponse(BaseModel):
    id: int
    reported_player_id: int
    reporter_id: int
    reason: str
    description: Optional[str] = None
    video: Optional[str] = None
    status: ReportStatus
    resolution: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ReportSummary(BaseModel):
    total: int
    unprocessed: int
