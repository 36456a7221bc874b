"""
Activity log repository for ResumeRank.

Provides append and query access to the activity trail.
"""

from typing import Optional

from resumerank.data.models.activity import ActivityLogEntry
from resumerank.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class ActivityLogRepository(BaseRepository[ActivityLogEntry]):
    """Repository for activity log entries. Entries are never updated."""

    @property
    def collection_name(self) -> str:
        return "activity_log"

    @property
    def model_class(self) -> type[ActivityLogEntry]:
        return ActivityLogEntry

    async def append_async(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """Insert a new activity entry."""
        return await self.create_async(entry)

    async def get_by_resource_async(
        self,
        resource_type: str,
        resource_id: str,
        limit: int = 100,
    ) -> list[ActivityLogEntry]:
        """Get the activity trail of one resource, newest first."""
        return await self.find_async(
            {"resource_type": resource_type, "resource_id": resource_id},
            limit=limit,
            sort_by="created_at",
            sort_order=-1,
        )

    async def get_by_user_async(
        self,
        user_id: str,
        action: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ActivityLogEntry]:
        """Get a user's activity, optionally filtered by action."""
        query: dict = {"user_id": user_id}
        if action:
            query["action"] = action
        return await self.find_async(query, skip=skip, limit=limit)
