from typing import Optional, Sequence, TypeVar

from playerduo.core.schemas import StandardResponse, PaginatedData, PaginatedResponse

T = TypeVar("T")

def success_response(data: Optional[T] = None, message: str = "Success") -> StandardResponse[T]:
    """성공 응답 봉투. 라우터는 서비스 결과를 DTO 로 변환한 뒤 이 함수로 감싼다."""
    return StandardResponse[T](success=True, message=message, data=data)

def paginated_response(
    items: Sequence[T],
    total: int,
    page: int,
    page_size: int,
    message: str = "Success",
) -> PaginatedResponse[T]:
    """
    페이지 응답 봉투

    Args:
        items: 현재 페이지 항목
        total: 전체 항목 수 (total_pages 계산에 사용)
        page: 1부터 시작하는 페이지 번호
        page_size: 페이지 크기 (limit 쿼리 파라미터)
    """
    return PaginatedResponse[T](success=True, message=message, data=PaginatedData[T].of(items, total, page, page_size))
