import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from playerduo.cache.redis_cache import close_redis_client
from playerduo.db.database import engine

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    logger.info("Lifespan: Startup")
    yield
    logger.info("Lifespan: Shutdown")
    await close_redis_client()
    try:
        await engine.dispose()
        logger.info("Database connections closed successfully.")
    except SQLAlchemyError as e:
        logger.error(f"Error closing database connections: {e}", exc_info=True)
