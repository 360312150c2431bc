from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

class NotificationCreate(BaseModel):
    user_id: int
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: str = Field("system", max_length=50)
    action_url: Optional[str] = Field(None, max_length=500)
    reference_id: Optional[int] = None

class NotificationResponse(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: str
    action_url: Optional[str] = None
    reference_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class DeviceTokenRequest(BaseModel):
    device_token: str = Field(..., min_length=1, max_length=500)

class UnreadCountResponse(BaseModel):
    count: int
