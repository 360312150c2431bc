"""
FastAPI 애플리케이션 진입점
애플리케이션 생성 및 설정은 app 모듈에 위임
"""
import logging

from playerduo.core.config import settings
from playerduo.api.api import setup_api
from playerduo.app.base import create_app
from playerduo.app.middlewares import register_middlewares
from playerduo.app.exceptions import register_exception_handlers
from playerduo.app.openapi import register_openapi
from playerduo.core.logging import configure_logging

# 애플리케이션 생성 전 로깅 설정 적용
configure_logging(
    log_level=settings.LOG_LEVEL,
    json_logs=settings.JSON_LOGS,
    log_file=settings.LOG_FILE,
)

logger = logging.getLogger(__name__)

app = create_app()

register_middlewares(app)

register_exception_handlers(app)

register_openapi(app)

setup_api(app)
