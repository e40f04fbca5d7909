"""Notification port for committed ledger events"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import redis.asyncio as redis

from splitledger.schemas.event import LedgerEvent

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Receives ledger events after their mutation has committed"""

    @abstractmethod
    async def publish(self, event: LedgerEvent) -> None:
        """Deliver one event to its recipients"""


class NullNotifier(Notifier):
    """Drops every event; used when notifications are disabled"""

    async def publish(self, event: LedgerEvent) -> None:
        logger.debug("Notifications disabled, dropping %s", event.type.value)


class InMemoryNotifier(Notifier):
    """Keeps published events in a list for tests to inspect"""

    def __init__(self):
        self.events: List[LedgerEvent] = []

    async def publish(self, event: LedgerEvent) -> None:
        self.events.append(event)


class RedisNotifier(Notifier):
    """
    Fans events out over Redis pub/sub, one channel per recipient.

    Subscribers (websocket gateway, mailer) listen on
    ``{channel_prefix}:{user_id}``. Delivery happens after commit, so a
    Redis failure is logged and never undoes the mutation.
    """

    def __init__(
        self,
        redis_url: str,
        channel_prefix: str = "notifications",
        client: Optional[redis.Redis] = None,
    ):
        self.channel_prefix = channel_prefix
        self._client = client or redis.from_url(
            redis_url, encoding="utf-8", decode_responses=True
        )

    def channel_for(self, user_id) -> str:
        return f"{self.channel_prefix}:{user_id}"

    async def publish(self, event: LedgerEvent) -> None:
        message = event.model_dump_json()
        try:
            pipeline = self._client.pipeline()
            for recipient_id in event.recipient_ids:
                pipeline.publish(self.channel_for(recipient_id), message)
            await pipeline.execute()
        except redis.RedisError as e:
            logger.warning(
                "Notification delivery failed for %s (%s): %s",
                event.type.value,
                event.expense_id or event.settlement_id,
                e,
            )

    async def close(self) -> None:
        """Close Redis connection"""
        await self._client.aclose()
