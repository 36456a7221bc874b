"""
Per-user, per-action sliding-window rate limiting.

Two backends share one interface: an in-process limiter for a single
worker, and a MongoDB-backed limiter whose window is shared by every
process using the same database.
"""

import time
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from typing import Callable, Optional

from resumerank.data.database import DatabaseManager
from resumerank.utils.config import RateLimitSettings
from resumerank.utils.constants import ACTION_AI_ANALYSIS
from resumerank.utils.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


class RateLimiter(ABC):
    """Sliding-window limiter keyed by (user, action)."""

    def __init__(self, limits: dict[str, int], window_seconds: float = 60.0) -> None:
        self.limits = dict(limits)
        self.window_seconds = window_seconds

    def limit_for(self, action: str) -> int:
        try:
            return self.limits[action]
        except KeyError:
            raise ValueError(f"Unknown rate limit action: {action}") from None

    async def check(self, user_id: str, action: str = ACTION_AI_ANALYSIS) -> bool:
        """
        Record a request and report whether it is within the limit.

        Denied requests are not recorded.
        """
        limit = self.limit_for(action)
        allowed = await self._hit(user_id, action, limit)
        if not allowed:
            logger.info(
                f"Rate limit reached for user {user_id} on '{action}' "
                f"({limit} per {self.window_seconds:g}s)"
            )
        return allowed

    @abstractmethod
    async def _hit(self, user_id: str, action: str, limit: int) -> bool:
        pass


class InMemoryRateLimiter(RateLimiter):
    """Rate limiter holding request timestamps in process memory."""

    def __init__(
        self,
        limits: dict[str, int],
        window_seconds: float = 60.0,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(limits, window_seconds)
        self._clock = clock or time.monotonic
        self._requests: dict[tuple[str, str], deque[float]] = defaultdict(deque)

    async def _hit(self, user_id: str, action: str, limit: int) -> bool:
        now = self._clock()
        cutoff = now - self.window_seconds
        timestamps = self._requests[(user_id, action)]

        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

        if len(timestamps) >= limit:
            return False

        timestamps.append(now)
        return True

    def reset(self) -> None:
        """Forget every recorded request."""
        self._requests.clear()


class MongoRateLimiter(RateLimiter):
    """
    Rate limiter storing one event document per admitted request.

    Counting and inserting are separate operations, so concurrent
    requests from one user may briefly exceed the limit.
    """

    collection_name = "rate_limit_events"

    def __init__(
        self,
        db_manager: DatabaseManager,
        limits: dict[str, int],
        window_seconds: float = 60.0,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(limits, window_seconds)
        self._db_manager = db_manager
        self._clock = clock or time.time

    async def _hit(self, user_id: str, action: str, limit: int) -> bool:
        collection = self._db_manager.get_collection(self.collection_name)
        now = self._clock()
        cutoff = now - self.window_seconds
        key = {"client_key": user_id, "route_key": action}

        await collection.delete_many({**key, "created_at": {"$lte": cutoff}})
        count = await collection.count_documents({**key, "created_at": {"$gt": cutoff}})
        if count >= limit:
            return False

        await collection.insert_one({**key, "created_at": now})
        return True


def create_rate_limiter(
    rate_settings: RateLimitSettings,
    db_manager: Optional[DatabaseManager] = None,
) -> RateLimiter:
    """Build the configured rate limiter backend."""
    if rate_settings.backend == "mongodb":
        if db_manager is None:
            raise ValueError("The mongodb rate limit backend needs a database manager")
        return MongoRateLimiter(
            db_manager,
            rate_settings.limits,
            window_seconds=rate_settings.window_seconds,
        )
    return InMemoryRateLimiter(rate_settings.limits, window_seconds=rate_settings.window_seconds)
