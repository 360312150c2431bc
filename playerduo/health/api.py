"""
헬스 체크 API
"""
import logging
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerduo.core.config import settings
from playerduo.core.dependencies import get_db
from playerduo.core.exceptions import ServiceUnavailableException
from playerduo.core.schemas import ErrorResponse, StandardResponse
from playerduo.schemas.health import HealthCheckResponse
from playerduo.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])  # Prefix will be handled in api.py

@router.get(
    "",
    summary="기본 시스템 상태 확인",
    response_model=Dict[str, str],
    responses={
        status.HTTP_200_OK: {
            "description": "시스템 정상 작동 중",
            "content": {"application/json": {"example": {"status": "ok", "version": "1.0.0", "environment": "prod"}}},
        }
    },
)
async def basic_health_check() -> Dict[str, str]:
    """로드 밸런서 상태 확인용. 상태, 버전, 환경 정보를 반환한다."""
    return {"status": "ok", "version": settings.VERSION, "environment": settings.ENVIRONMENT}

@router.get(
    "/db",
    response_model=StandardResponse[HealthCheckResponse],
    summary="데이터베이스 연결 확인",
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse, "description": "데이터베이스 연결 실패"}},
)
async def database_health_check(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        raise ServiceUnavailableException("Database connection failed")

    response_data = HealthCheckResponse(
        status="ok",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc),
        dependencies=[{"name": "database", "status": "ok"}],
    )
    return success_response(data=response_data, message="Service is healthy.")
