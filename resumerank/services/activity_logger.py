"""
Activity logging for ResumeRank.

Appends entries to the activity trail and mirrors them to the
activity log sink.
"""

from resumerank.data.models.activity import ActivityLogEntry
from resumerank.data.repositories.activity_repository import ActivityLogRepository
from resumerank.utils.logger import audit_log, get_logger

logger = get_logger(__name__)


class ActivityLogger:
    """
    Best-effort writer for the activity trail.

    A failed write is logged and reported as False, never raised.
    """

    def __init__(self, repository: ActivityLogRepository) -> None:
        self._repository = repository

    async def append(self, entry: ActivityLogEntry) -> bool:
        """Append one entry. Returns True if it was stored."""
        try:
            await self._repository.append_async(entry)
        except Exception as e:
            logger.warning(f"Failed to write activity entry '{entry.action}': {e}")
            return False

        audit_log(
            entry.action,
            {
                "user_id": entry.user_id,
                "resource_type": entry.resource_type,
                "resource_id": entry.resource_id,
                "metadata": entry.metadata,
            },
        )
        return True
