from fastapi import APIRouter, FastAPI
import logging

from playerduo.core.config import settings
from playerduo.auth import api as auth_api
from playerduo.users import api as users_api
from playerduo.games import api as games_api
from playerduo.game_players import api as game_players_api
from playerduo.wallet import api as wallet_api
from playerduo.moments import api as moments_api
from playerduo.notifications import api as notifications_api
from playerduo.reports import api as reports_api
from playerduo.health import api as health_api

logger = logging.getLogger(__name__)

# API 라우터 초기화
api_router = APIRouter()

# 각 라우터 등록
api_router.include_router(auth_api.router, prefix="/auth")
api_router.include_router(users_api.router, prefix="/users")
api_router.include_router(games_api.router, prefix="/games")
api_router.include_router(game_players_api.router, prefix="/game-players")
api_router.include_router(wallet_api.router, prefix="/payments")
api_router.include_router(moments_api.router, prefix="/moments")
api_router.include_router(notifications_api.router, prefix="/notifications")
api_router.include_router(reports_api.router, prefix="/reports")
api_router.include_router(health_api.router, prefix="/health")

def setup_api(app: FastAPI) -> None:
    """API 라우터 등록"""
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    logger.info(f"API routers mounted under {settings.API_V1_PREFIX}")
