"""
시간 관련 헬퍼
DB에는 timezone 정보 없는 UTC 시각을 저장한다.
"""
from datetime import datetime, timedelta, timezone

VIETNAM_TZ = timezone(timedelta(hours=7), name="Asia/Ho_Chi_Minh")

def utcnow() -> datetime:
    """naive UTC 현재 시각"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def vietnam_now() -> datetime:
    return datetime.now(VIETNAM_TZ)

def epoch_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)
