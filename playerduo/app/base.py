import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from playerduo.core.config import settings
from playerduo.app.lifespan import lifespan

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url=None,  # /api/docs 는 커스텀 Swagger UI 사용
        redoc_url=None,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS middleware added with origins: {settings.BACKEND_CORS_ORIGINS}")
    else:
        logger.info("CORS middleware not added (no origins configured)")

    return app
