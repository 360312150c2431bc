import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from playerduo.core.exceptions import (
    AppException,
    NotFoundError,
    ValidationError as ServiceValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    BusinessLogicError,
    InvalidInputError,
    DatabaseError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidPaymentStatusError,
    DuplicateTransactionError,
    PaymentGatewayError,
    ServiceUnavailableException,
)
from playerduo.core.schemas import ErrorResponse, ErrorResponseDetail

logger = logging.getLogger(__name__)

# 예외 클래스별 error_code (MRO 순서로 조회)
ERROR_CODES = {
    NotFoundError: "resource_not_found",
    AuthenticationError: "authentication_failed",
    AuthorizationError: "permission_denied",
    ConflictError: "conflict",
    DuplicateTransactionError: "duplicate_transaction",
    ServiceValidationError: "validation_error",
    InvalidInputError: "invalid_input",
    BusinessLogicError: "business_rule_violation",
    InsufficientFundsError: "insufficient_funds",
    InvalidAmountError: "invalid_amount",
    InvalidPaymentStatusError: "invalid_payment_status",
    PaymentGatewayError: "payment_gateway_error",
    DatabaseError: "database_error",
    ServiceUnavailableException: "service_unavailable",
}

def error_code_for(exc: AppException) -> str:
    for cls in type(exc).__mro__:
        if cls in ERROR_CODES:
            return ERROR_CODES[cls]
    return "application_error"

def error_json(
    status_code: int,
    message: str,
    error_code: str,
    details: Optional[List[ErrorResponseDetail]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, error_code=error_code, details=details).model_dump(exclude_none=True),
    )

def register_exception_handlers(app: FastAPI):
    """Register custom exception handlers for the FastAPI app."""

    @app.exception_handler(NotFoundError)
    async def not_found_exception_handler(request: Request, exc: NotFoundError):
        logger.info(f"Resource not found: {exc}")
        return error_json(status.HTTP_404_NOT_FOUND, exc.message, error_code_for(exc))

    @app.exception_handler(AuthenticationError)
    async def authentication_exception_handler(request: Request, exc: AuthenticationError):
        logger.warning(f"Authentication error: {exc}")
        return error_json(status.HTTP_401_UNAUTHORIZED, exc.message, error_code_for(exc))

    @app.exception_handler(AuthorizationError)
    async def permission_exception_handler(request: Request, exc: AuthorizationError):
        logger.warning(f"Permission denied: {exc}")
        return error_json(status.HTTP_403_FORBIDDEN, exc.message, error_code_for(exc))

    @app.exception_handler(ConflictError)
    async def conflict_exception_handler(request: Request, exc: ConflictError):
        logger.info(f"Conflict error: {exc}")
        return error_json(status.HTTP_409_CONFLICT, exc.message, error_code_for(exc))

    @app.exception_handler(DatabaseError)
    async def database_exception_handler(request: Request, exc: DatabaseError):
        logger.error(f"Database error: {exc}", exc_info=True)
        return error_json(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected database error occurred.", error_code_for(exc)
        )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        # 잔액 부족, 금액 오류, 결제 상태 오류, 비즈니스 규칙 위반 등 (대부분 400)
        logger.info(f"{type(exc).__name__}: {exc}")
        return error_json(exc.status_code, exc.message, error_code_for(exc))

    @app.exception_handler(RequestValidationError)
    async def fast_api_validation_exception_handler(request: Request, exc: RequestValidationError):
        details: List[ErrorResponseDetail] = []
        for error in exc.errors():
            details.append(ErrorResponseDetail(
                loc=[str(loc) for loc in error.get('loc', [])],
                msg=error.get('msg', 'Validation error'),
                type=error.get('type', 'value_error')
            ))
        logger.info(f"Request validation failed: {details}")
        return error_json(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Request validation failed",
            "request_validation_error",
            details,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception occurred: {exc}")
        return error_json(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected internal server error occurred.",
            "internal_server_error",
        )

    logger.info("Standard exception handlers registered.")
