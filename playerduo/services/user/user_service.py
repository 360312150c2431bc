"""
사용자 관리 서비스
프로필, 관리자 작업, 차단 목록 처리
"""
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional, Sequence, Dict, Any, List, Iterable

from playerduo.core.config import settings
from playerduo.core.exceptions import NotFoundError, InvalidInputError, BusinessLogicError, ConflictError
from playerduo.core.security import get_password_hash
from playerduo.models.domain.user import User, UserBlock
from playerduo.models.enums import Role
from playerduo.repositories.user_repository import UserRepository, UserBlockRepository
from playerduo.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

COVER_IMAGE_DIR = "cover-images"
RECENT_USER_LIMIT = 10

def user_status_text(user: User) -> str:
    """계정 상태 표시 문구"""
    if user.enabled and user.account_non_locked:
        return "Đang hoạt động"
    if user.enabled:
        return "Bị khóa"
    if user.account_non_locked:
        return "Đang chờ duyệt"
    return "Không hoạt động"

def primary_role(user: User) -> str:
    return user.roles[0] if user.roles else "User"

def growth_percent(current: int, previous: int) -> float:
    """지난주 대비 증가율 (%)"""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) * 100.0 / previous, 2)

def validate_password(password: str) -> None:
    if password is None or len(password) < settings.PASSWORD_MIN_LENGTH:
        raise InvalidInputError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

class UserService:

    PROFILE_FIELDS = (
        "email", "full_name", "phone_number", "address", "bio", "gender", "avatar_url", "cover_image_url",
    )

    def __init__(self, user_repo: UserRepository, block_repo: UserBlockRepository):
        self.user_repo = user_repo
        self.block_repo = block_repo

    async def get_user(self, user_id: int) -> User:
        user = await self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def count_users(self) -> int:
        return await self.user_repo.count()

    async def list_users(self, offset: int = 0, limit: int = 0) -> Sequence[User]:
        return await self.user_repo.find_many(skip=offset, limit=limit, sort_by="id")

    async def get_growth_percent(self) -> float:
        """최근 7일 가입자 수를 그 이전 7일과 비교"""
        now = utcnow()
        week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)
        current = await self.user_repo.count_created_between(week_ago, now)
        previous = await self.user_repo.count_created_between(two_weeks_ago, week_ago)
        return growth_percent(current, previous)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        roles: Optional[Iterable[Role]] = None,
        **profile: Any,
    ) -> User:
        if await self.user_repo.exists_by_username(username):
            raise InvalidInputError("Username already exists")
        if await self.user_repo.exists_by_email(email):
            raise InvalidInputError("Email already exists")
        validate_password(password)

        role_values = [Role(r).value for r in (roles or [Role.USER])]
        user = User(
            username=username,
            email=email,
            password_hash=get_password_hash(password),
            roles=role_values,
            coin=0,
            enabled=True,
            account_non_locked=True,
            is_online=False,
            **{k: v for k, v in profile.items() if k in self.PROFILE_FIELDS},
        )
        user = await self.user_repo.add(user)
        logger.info(f"User {user.id} ({username}) created with roles {role_values}")
        return user

    async def update_user(self, user_id: int, data: Dict[str, Any]) -> User:
        user = await self.get_user(user_id)
        new_email = data.get("email")
        if new_email and new_email != user.email and await self.user_repo.exists_by_email(new_email):
            raise ConflictError("User", new_email, "Email already exists")
        for field in self.PROFILE_FIELDS:
            if field in data and data[field] is not None:
                setattr(user, field, data[field])
        return await self.user_repo.save(user)

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        await self.user_repo.delete(user)
        logger.info(f"User {user_id} deleted")

    async def set_locked(self, user_id: int, locked: bool) -> User:
        user = await self.get_user(user_id)
        user.account_non_locked = not locked
        await self.user_repo.save(user)
        logger.info(f"User {user_id} {'locked' if locked else 'unlocked'}")
        return user

    async def reset_password(self, user_id: int, new_password: str) -> None:
        """관리자 비밀번호 재설정"""
        validate_password(new_password)
        user = await self.get_user(user_id)
        user.password_hash = get_password_hash(new_password)
        await self.user_repo.save(user)
        logger.info(f"Password reset by admin for user {user_id}")

    async def update_roles(self, user_id: int, roles: Iterable[Role]) -> User:
        role_values = list(dict.fromkeys(Role(r).value for r in roles))
        if not role_values:
            raise InvalidInputError("At least one role is required")
        user = await self.get_user(user_id)
        user.roles = role_values
        return await self.user_repo.save(user)

    async def grant_role(self, user: User, role: Role) -> None:
        if not user.has_role(role):
            user.roles = list(user.roles or []) + [role.value]
            await self.user_repo.save(user)

    async def set_online(self, user: User, online: bool) -> None:
        user.is_online = online
        user.last_active_at = utcnow()
        await self.user_repo.save(user)

    async def get_online_status(self, user_id: int) -> Dict[str, Any]:
        user = await self.get_user(user_id)
        return {"user_id": user.id, "is_online": user.is_online, "last_active_at": user.last_active_at}

    async def get_cover_image_url(self, user_id: int) -> Optional[str]:
        user = await self.get_user(user_id)
        return user.cover_image_url

    def resolve_cover_image_path(self, cover_image_url: str) -> Path:
        """저장된 커버 이미지 경로를 UPLOAD_DIR/cover-images 아래 실제 파일 경로로 변환"""
        upload_root = Path(settings.UPLOAD_DIR).resolve()
        relative = cover_image_url.lstrip("/")
        upload_prefix = f"{Path(settings.UPLOAD_DIR).name}/"
        if relative.startswith(upload_prefix):
            relative = relative[len(upload_prefix):]
        if not relative.startswith(f"{COVER_IMAGE_DIR}/"):
            relative = f"{COVER_IMAGE_DIR}/{relative}"
        path = (upload_root / relative).resolve()
        if upload_root not in path.parents:
            raise InvalidInputError("Invalid cover image path")
        return path

    async def get_cover_image_bytes(self, user_id: int) -> bytes:
        user = await self.get_user(user_id)
        if not user.cover_image_url:
            raise NotFoundError("Cover image", user_id)
        path = self.resolve_cover_image_path(user.cover_image_url)
        if not path.is_file():
            raise NotFoundError("Cover image", user_id)
        return path.read_bytes()

    async def get_recent_users(self) -> List[Dict[str, Any]]:
        users = await self.user_repo.find_recent(RECENT_USER_LIMIT)
        return [
            {
                "full_name": user.full_name,
                "email": user.email,
                "role": primary_role(user),
                "status": user_status_text(user),
                "joined_date": user.created_at.date().isoformat() if user.created_at else "",
                "balance": user.coin,
            }
            for user in users
        ]

    async def get_user_summaries(self) -> List[Dict[str, Any]]:
        users = await self.list_users()
        return [
            {
                "full_name": user.full_name,
                "email": user.email,
                "role": primary_role(user),
                "status": user_status_text(user),
                "created_date": user.created_at.date().isoformat() if user.created_at else "",
            }
            for user in users
        ]

    # --- 차단 ---

    async def block_user(self, blocker: User, blocked_id: int) -> UserBlock:
        if blocker.id == blocked_id:
            raise BusinessLogicError("You cannot block yourself")
        await self.get_user(blocked_id)
        if await self.block_repo.is_blocked(blocker.id, blocked_id):
            raise ConflictError("UserBlock", str(blocked_id), "User is already blocked")
        block = await self.block_repo.add(UserBlock(blocker_id=blocker.id, blocked_id=blocked_id))
        logger.info(f"User {blocker.id} blocked user {blocked_id}")
        return block

    async def unblock_user(self, blocker: User, blocked_id: int) -> None:
        block = await self.block_repo.get_block(blocker.id, blocked_id)
        if block is None:
            raise NotFoundError("UserBlock", blocked_id, "User is not blocked")
        await self.block_repo.delete(block)
        logger.info(f"User {blocker.id} unblocked user {blocked_id}")

    async def get_blocked_users(self, blocker: User) -> Sequence[User]:
        return await self.block_repo.find_blocked_users(blocker.id)
