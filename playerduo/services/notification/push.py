"""
푸시 알림 전달 (외부 협력자)
알림 저장과 분리되어 있으며 전달 실패는 호출자 트랜잭션에 영향을 주지 않는다.
"""
import logging
from typing import Optional, Protocol

import httpx

from playerduo.core.config import settings

logger = logging.getLogger(__name__)

class PushSender(Protocol):
    async def send(
        self,
        user_id: int,
        title: str,
        body: str,
        type: str,
        action_url: Optional[str],
        ref_id: Optional[int],
    ) -> None:
        ...

class LoggingPushSender:
    """전달 채널이 없을 때 사용하는 기본 구현"""

    async def send(self, user_id, title, body, type, action_url, ref_id) -> None:
        logger.info(f"Push (log only) to user {user_id}: [{type}] {title} ref={ref_id}")

class WebhookPushSender:
    """외부 푸시 게이트웨이로 HTTP POST"""

    def __init__(self, url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def send(self, user_id, title, body, type, action_url, ref_id) -> None:
        payload = {
            "userId": user_id,
            "title": title,
            "body": body,
            "type": type,
            "actionUrl": action_url,
            "refId": ref_id,
        }
        if self._client is not None:
            response = await self._client.post(self.url, json=payload, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
        response.raise_for_status()
        logger.debug(f"Push delivered to user {user_id} via webhook (status {response.status_code})")

def get_push_sender() -> PushSender:
    if settings.PUSH_WEBHOOK_URL:
        return WebhookPushSender(settings.PUSH_WEBHOOK_URL, timeout=settings.PUSH_TIMEOUT_SECONDS)
    return LoggingPushSender()
