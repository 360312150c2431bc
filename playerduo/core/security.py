from typing import Optional, Dict, Any, List
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from playerduo.core.config import settings
from playerduo.core.exceptions import AuthenticationError

# 비밀번호 해싱을 위한 암호 컨텍스트
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    비밀번호 검증

    Args:
        plain_password: 평문 비밀번호
        hashed_password: 해시된 비밀번호
    """
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """비밀번호 해싱"""
    return pwd_context.hash(password)

def create_access_token(
    subject: Any,
    roles: Optional[List[str]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    액세스 토큰 생성

    Args:
        subject: 토큰 주체 (사용자 ID)
        roles: 사용자 역할 목록
        expires_delta: 만료 시간 (기본값: ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        str: 인코딩된 JWT
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "roles": roles or [],
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> Dict[str, Any]:
    """
    액세스 토큰 검증 및 디코딩

    Raises:
        AuthenticationError: 만료되었거나 유효하지 않은 토큰
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid authentication token")

def generate_reset_token() -> str:
    """비밀번호 재설정용 일회용 토큰"""
    return secrets.token_urlsafe(32)
