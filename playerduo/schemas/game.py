from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from playerduo.models.enums import GameStatus, GamePlayerStatus

# --- Game Schemas ---

class GameBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    platform: Optional[str] = Field(None, max_length=50)
    status: GameStatus = GameStatus.ACTIVE
    image_url: Optional[str] = Field(None, max_length=500)
    website_url: Optional[str] = Field(None, max_length=500)
    requirements: Optional[str] = None
    has_roles: bool = False
    available_roles: List[str] = Field(default_factory=list)
    available_ranks: List[str] = Field(default_factory=list)

class GameCreate(GameBase):
    pass

class GameUpdate(GameBase):
    pass

class GameResponse(GameBase):
    id: int
    status: str
    created_at: datetime
    player_count: int = 0

    model_config = ConfigDict(from_attributes=True)

# --- Game Player Schemas ---

class GamePlayerCreate(BaseModel):
    game_id: int
    username: str = Field(..., min_length=1, max_length=100)
    rank: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = Field(None, max_length=50)
    server: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    price_per_hour: int = Field(..., ge=1, description="시간당 코인")

class GamePlayerUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    rank: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = Field(None, max_length=50)
    server: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    price_per_hour: Optional[int] = Field(None, ge=1)
    status: Optional[GamePlayerStatus] = None

class GamePlayerResponse(BaseModel):
    id: int
    user_id: int
    game_id: int
    game_name: Optional[str] = None
    username: str
    rank: Optional[str] = None
    role: Optional[str] = None
    server: Optional[str] = None
    description: Optional[str] = None
    price_per_hour: int
    status: GamePlayerStatus
    hired_by: Optional[int] = None
    hire_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    total_hours: int
    created_at: datetime

class GamePlayerSummary(BaseModel):
    """ 관리자 대시보드용 플레이어 요약 """
    id: int
    name: str
    email: Optional[str] = None
    total_orders: int
    total_reviews: int
    total_revenue: int
    status: str
    rank_label: str
    rating: float
    game_name: Optional[str] = None
    avatar_url: Optional[str] = None
