import json
import logging
from sqlalchemy.types import TypeDecorator, Text

logger = logging.getLogger(__name__)

class StringListType(TypeDecorator):
    """
    문자열 목록 컬럼 (역할, 게임 랭크 목록 등).

    PostgreSQL에서는 네이티브 JSONB 타입을 사용하고,
    다른 데이터베이스(예: SQLite)에서는 JSON 문자열을 TEXT로 저장합니다.
    목록은 통째로 재할당해야 변경이 감지된다.
    """
    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import JSONB
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            value = []
        value = [str(item) for item in value]
        if dialect.name == 'postgresql':
            return value
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value, dialect):
        if value is None:
            return []
        if dialect.name == 'postgresql':
            return list(value)
        try:
            return list(json.loads(value))
        except (json.JSONDecodeError, TypeError):
            logger.error(f"Failed to decode string list from database: {value}")
            return []
