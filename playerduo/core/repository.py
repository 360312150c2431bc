from typing import Generic, TypeVar, Type, List, Dict, Any, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, asc, desc
import logging

T = TypeVar('T')  # 데이터베이스 모델 타입

logger = logging.getLogger(__name__)

class BaseRepository(Generic[T]):
    """
    모든 레포지토리의 기본 클래스.
    데이터베이스 액세스를 캡슐화하고 표준화합니다.
    """

    def __init__(self, session: AsyncSession, model_class: Type[T]):
        """
        Parameters:
            session: SQLAlchemy 비동기 세션
            model_class: 이 레포지토리가 다루는 모델 클래스
        """
        if session is None:
            raise ValueError("Database session is required for BaseRepository.")
        self.session = session
        self.model_class = model_class

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]] = None):
        """
        쿼리에 필터 조건 적용.
        동등 비교와 `__in` 연산자만 지원한다.
        Example: filters = {"renter_id": 3, "status__in": ["PENDING", "PROCESSING"]}
        """
        if not filters:
            return query

        for key, value in filters.items():
            if value is None:
                continue

            field_name, _, operator = key.partition("__")
            if not hasattr(self.model_class, field_name):
                logger.warning(f"Filtering skipped: Field '{field_name}' not found on model {self.model_class.__name__}.")
                continue

            column = getattr(self.model_class, field_name)

            if operator == "in":
                query = query.where(column.in_(list(value)))
            elif not operator:
                query = query.where(column == value)
            else:
                logger.warning(f"Unsupported filter operator '{operator}' for key '{key}'. Skipping.")

        return query

    def _apply_sort(self, query, sort_by: Optional[str], sort_order: str):
        if not sort_by:
            return query
        if not hasattr(self.model_class, sort_by):
            logger.warning(f"Sorting skipped: Sort field '{sort_by}' not found on model {self.model_class.__name__}.")
            return query
        column = getattr(self.model_class, sort_by)
        return query.order_by(desc(column) if sort_order.lower() == "desc" else asc(column))

    async def get(self, item_id: Any) -> Optional[T]:
        """기본 키로 단일 항목 조회"""
        query = select(self.model_class).where(self.model_class.id == item_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_one(self, filters: Dict[str, Any]) -> Optional[T]:
        """필터 조건에 맞는 첫 번째 항목 조회"""
        query = self._apply_filters(select(self.model_class), filters)
        result = await self.session.execute(query.limit(1))
        return result.scalars().first()

    async def find_many(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Sequence[T]:
        """
        필터링, 정렬, 페이지네이션을 지원하는 다중 항목 조회

        Parameters:
            skip: 건너뛸 항목 수 (0 이상)
            limit: 반환할 최대 항목 수 (0이면 제한 없음)
            filters: 필터 조건 딕셔너리
            sort_by: 정렬 기준 필드 이름
            sort_order: 정렬 방향 ("asc" 또는 "desc")
        """
        if skip < 0 or limit < 0:
            raise ValueError("Skip and limit must be non-negative.")

        query = self._apply_filters(select(self.model_class), filters)
        query = self._apply_sort(query, sort_by, sort_order)
        if skip > 0:
            query = query.offset(skip)
        if limit > 0:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """필터 조건에 맞는 항목 개수 조회"""
        query = select(func.count(self.model_class.id)).select_from(self.model_class)
        query = self._apply_filters(query, filters)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() or 0

    async def add(self, item: T) -> T:
        """새 항목 저장 (flush 까지만 수행, 커밋은 요청 단위로 처리)"""
        self.session.add(item)
        await self.session.flush()
        logger.debug(f"Created {self.model_class.__name__} record with ID: {getattr(item, 'id', 'N/A')}")
        return item

    async def save(self, item: T) -> T:
        """변경된 항목을 flush"""
        await self.session.flush()
        return item

    async def delete(self, item: T) -> None:
        await self.session.delete(item)
        await self.session.flush()
