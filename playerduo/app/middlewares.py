import uuid
import logging

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        extra = {"request_id": request_id}
        logger.info(f"Request started: {request.method} {request.url.path}", extra=extra)
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} - {e}", exc_info=True, extra=extra)
            raise
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(f"Request finished: {request.method} {request.url.path} - {response.status_code}", extra=extra)
        return response

def register_middlewares(app: FastAPI):
    """Register middlewares for the FastAPI app."""
    app.add_middleware(RequestIDMiddleware)
