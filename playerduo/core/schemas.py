"""
API 응답 봉투(envelope) 스키마
성공: {success, message, data} / 실패: {success: false, message, error_code, details?}
"""
from math import ceil
from typing import Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

class StandardResponse(BaseModel, Generic[T]):
    """모든 JSON 엔드포인트의 공통 응답"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

class ErrorResponseDetail(BaseModel):
    """요청 검증 실패 시 필드 단위 상세"""
    loc: Optional[List[str]] = Field(None, description="예: ['body', 'coin']")
    msg: str
    type: str

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error_code: Optional[str] = Field(None, description="예: insufficient_funds, invalid_payment_status")
    details: Optional[List[ErrorResponseDetail]] = None

class PaginatedData(BaseModel, Generic[T]):
    """1부터 시작하는 페이지 정보와 항목 목록"""
    items: List[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @classmethod
    def of(cls, items: Sequence[T], total: int, page: int, page_size: int) -> "PaginatedData[T]":
        total_pages = ceil(total / page_size) if page_size > 0 else int(total > 0)
        return cls(
            items=list(items),
            page=page,
            page_size=page_size,
            total_items=total,
            total_pages=total_pages,
        )

class PaginatedResponse(StandardResponse[PaginatedData[T]], Generic[T]):
    """data 에 PaginatedData 를 담는 응답 (모먼트 목록, 사용자 목록)"""
