from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Optional, List
from datetime import datetime

from playerduo.models.enums import Role

# --- User Schemas ---

class UserBase(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    gender: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = Field(None, max_length=500)
    cover_image_url: Optional[str] = Field(None, max_length=500)

class UserCreate(UserBase):
    """ 관리자용 사용자 생성 """
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)
    roles: List[Role] = Field(default_factory=lambda: [Role.USER])

class UserUpdate(UserBase):
    email: Optional[EmailStr] = None

class UserResponse(UserBase):
    id: int
    username: str
    email: str
    coin: int
    roles: List[str]
    enabled: bool
    account_non_locked: bool
    is_online: bool
    last_active_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class UserPublicInfo(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class UserRecentItem(BaseModel):
    full_name: Optional[str] = None
    email: str
    role: str
    status: str
    joined_date: str
    balance: int

class UserSummaryItem(BaseModel):
    full_name: Optional[str] = None
    email: str
    role: str
    status: str
    created_date: str

class PasswordResetByAdmin(BaseModel):
    new_password: str

class RolesUpdate(BaseModel):
    roles: List[Role] = Field(..., min_length=1)

class OnlineStatusResponse(BaseModel):
    user_id: int
    is_online: bool
    last_active_at: Optional[datetime] = None

class CoverImageResponse(BaseModel):
    cover_image_url: Optional[str] = None

class BlockedUserResponse(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
