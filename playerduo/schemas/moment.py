from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from playerduo.models.enums import MomentStatus

class MomentRequest(BaseModel):
    """ 모먼트 생성 / 수정 요청 """
    content: str = Field(..., description="본문 (최대 1000자)")
    image_urls: List[str] = Field(default_factory=list, description="이미지 URL 목록 (최대 10개)")

class MomentResponse(BaseModel):
    id: int
    game_player_id: int
    game_player_username: str
    game_name: Optional[str] = None
    content: str
    image_urls: List[str]
    status: MomentStatus
    created_at: datetime
    updated_at: datetime
    follower_count: int
    player_user_id: Optional[int] = None

class FollowStatusResponse(BaseModel):
    game_player_id: int
    following: bool
    follower_count: int
