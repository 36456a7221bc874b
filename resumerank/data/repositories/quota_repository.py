"""
Quota repository for ResumeRank.

Provides access to per-user AI credit rows.
"""

from typing import Optional

from pymongo import ReturnDocument

from resumerank.data.models.base import utc_now
from resumerank.data.models.quota import UserQuota
from resumerank.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class QuotaRepository(BaseRepository[UserQuota]):
    """Repository for user quota document operations."""

    @property
    def collection_name(self) -> str:
        return "user_quotas"

    @property
    def model_class(self) -> type[UserQuota]:
        return UserQuota

    async def get_by_user_async(self, user_id: str) -> Optional[UserQuota]:
        """Get the quota row for a user, if one exists."""
        return await self.find_one_async({"user_id": user_id})

    async def increment_used_credits_async(self, user_id: str) -> Optional[UserQuota]:
        """
        Increment a user's used credits by one.

        Single-document ``$inc``; no check against the allotment is made here.

        Returns:
            The updated quota, or None if the user has no quota row
        """
        collection = self._get_collection()
        document = await collection.find_one_and_update(
            {"user_id": user_id},
            {"$inc": {"used_credits": 1}, "$set": {"updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            logger.warning(f"No quota row for user {user_id}; credit not recorded")
        return self._to_model(document)

    async def ensure_quota_async(self, user_id: str, ai_credits: int) -> UserQuota:
        """Create a quota row for a user unless one exists already."""
        now = utc_now()
        collection = self._get_collection()
        document = await collection.find_one_and_update(
            {"user_id": user_id},
            {
                "$setOnInsert": {
                    "user_id": user_id,
                    "ai_credits": ai_credits,
                    "used_credits": 0,
                    "created_at": now,
                    "updated_at": now,
                }
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(document)
