"""
데이터베이스 연결 및 세션 관리
"""
import logging
from typing import AsyncGenerator, Dict, Any

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from playerduo.core.config import settings

logger = logging.getLogger(__name__)

def _engine_options(url: str) -> Dict[str, Any]:
    """드라이버별 엔진 옵션 (SQLite는 풀 옵션을 지원하지 않음)"""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_timeout": 30,
        "pool_recycle": 1800,
    }

DATABASE_URI = str(settings.SQLALCHEMY_DATABASE_URI)

engine = create_async_engine(DATABASE_URI, **_engine_options(DATABASE_URI))

session_factory = async_sessionmaker(
    engine, expire_on_commit=False, class_=AsyncSession
)

# SQLAlchemy 기본 모델
Base = declarative_base()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 DB 세션 제공. 정상 종료 시 커밋, 예외 시 롤백"""
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
