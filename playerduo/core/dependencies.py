"""
공통 FastAPI 의존성
"""
from typing import AsyncGenerator, Dict, Optional
import logging

from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis

from playerduo.db.database import get_db as get_db_session
from playerduo.cache.redis_cache import get_redis_client
from playerduo.core.security import decode_access_token
from playerduo.core.exceptions import AuthenticationError, PermissionDeniedError
from playerduo.models.domain.user import User
from playerduo.models.enums import Role
from playerduo.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# --- Database Dependency ---

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a database session dependency.
    Uses the main session generator from database.py.
    """
    async for session in get_db_session():
        yield session

async def get_redis() -> Optional[Redis]:
    return await get_redis_client()

# --- Authentication Dependencies ---

bearer_scheme = HTTPBearer(auto_error=False)

async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Bearer 토큰이 있으면 사용자를 반환, 없으면 None"""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid authentication token")

    user = await UserRepository(db).get(user_id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    if not user.enabled:
        raise AuthenticationError("Account is disabled")
    if not user.account_non_locked:
        raise AuthenticationError("Account is locked")
    return user

async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """인증된 사용자 (없으면 401)"""
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user

def require_roles(*roles: Role):
    """Factory for creating a dependency that requires one of the given roles."""
    async def _verify_roles_dependency(user: User = Depends(get_current_user)) -> User:
        if not any(user.has_role(role) for role in roles):
            required = " or ".join(role.value for role in roles)
            logger.warning(f"Permission denied: user {user.id} lacks role {required}")
            raise PermissionDeniedError(required)
        return user

    return _verify_roles_dependency

require_admin = require_roles(Role.ADMIN)
require_player = require_roles(Role.PLAYER)

def get_client_ip(request: Request) -> str:
    """Gets the client IP address from the request, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    logger.warning("Could not determine client IP address.")
    return "127.0.0.1"

# --- Common Parameter Dependencies ---

def common_pagination_params(
    page: int = Query(1, ge=1, description="Page number starting from 1"),
    limit: int = Query(10, ge=1, le=100, description="Number of items per page")
) -> Dict[str, int]:
    """Common pagination parameters (offset and limit, plus original page)."""
    offset = (page - 1) * limit
    return {"offset": offset, "limit": limit, "page": page}
