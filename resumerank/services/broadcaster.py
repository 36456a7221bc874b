"""
Realtime change broadcasting for ResumeRank.

Publishes candidate change events to topic subscribers. Delivery is
fire-and-forget: at most once, no acknowledgement, no retry.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resumerank.data.database import DatabaseManager
from resumerank.data.models.base import utc_now
from resumerank.utils.config import BroadcastSettings
from resumerank.utils.constants import (
    CANDIDATE_CHANGE_EVENT,
    JOB_TOPIC_TEMPLATE,
    USER_TOPIC_TEMPLATE,
)
from resumerank.utils.logger import get_logger

logger = get_logger(__name__)


class CandidateChangeEvent(BaseModel):
    """Payload announcing that a candidate record changed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action: str = "update"
    candidate_id: str
    timestamp: datetime = Field(default_factory=utc_now)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def job_topic(job_id: str) -> str:
    return JOB_TOPIC_TEMPLATE.format(job_id=job_id)


def user_topic(user_id: str) -> str:
    return USER_TOPIC_TEMPLATE.format(user_id=user_id)


class Broadcaster(ABC):
    """Publishes events to named topics."""

    @abstractmethod
    async def publish(self, topic: str, event: dict[str, Any]) -> None:
        """Publish one event; subscribers that miss it never see it."""
        pass


class InMemoryBroadcaster(Broadcaster):
    """Fans events out to in-process ``asyncio.Queue`` subscribers."""

    def __init__(self, max_queue_size: int = 100) -> None:
        self._max_queue_size = max_queue_size
        self._subscribers: dict[str, list[asyncio.Queue]] = defaultdict(list)

    def subscribe(self, topic: str) -> asyncio.Queue:
        """Register a new subscriber queue for a topic."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[topic].append(queue)
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        subscribers = self._subscribers.get(topic, [])
        if queue in subscribers:
            subscribers.remove(queue)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))

    async def publish(self, topic: str, event: dict[str, Any]) -> None:
        message = {"topic": topic, "event": CANDIDATE_CHANGE_EVENT, "payload": event}
        for queue in list(self._subscribers.get(topic, [])):
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full on '{topic}'; event dropped")


class MongoBroadcaster(Broadcaster):
    """
    Appends events to a capped collection.

    Subscribers follow the collection with a tailable cursor filtered on
    ``topic``.
    """

    def __init__(self, db_manager: DatabaseManager, collection_name: str = "realtime_events") -> None:
        self._db_manager = db_manager
        self._collection_name = collection_name

    async def publish(self, topic: str, event: dict[str, Any]) -> None:
        collection = self._db_manager.get_collection(self._collection_name)
        await collection.insert_one(
            {
                "topic": topic,
                "event": CANDIDATE_CHANGE_EVENT,
                "payload": event,
                "created_at": utc_now(),
            }
        )


def create_broadcaster(
    broadcast_settings: BroadcastSettings,
    db_manager: Optional[DatabaseManager] = None,
) -> Broadcaster:
    """Build the configured broadcaster backend."""
    if broadcast_settings.backend == "mongodb":
        if db_manager is None:
            raise ValueError("The mongodb broadcast backend needs a database manager")
        return MongoBroadcaster(db_manager, broadcast_settings.collection_name)
    return InMemoryBroadcaster()
