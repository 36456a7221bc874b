"""
AI credit admission for analysis attempts.
"""

from resumerank.data.repositories.quota_repository import QuotaRepository
from resumerank.utils.logger import LoggerMixin


class QuotaGuard(LoggerMixin):
    """
    Admits or denies analysis attempts from a user's remaining credits.

    Admission does not reserve a credit. Two concurrent analyses for the
    same user can both be admitted with one credit left; the store only
    offers single-document updates and the overshoot is accepted.
    """

    def __init__(self, quotas: QuotaRepository) -> None:
        self._quotas = quotas

    async def admit(self, user_id: str) -> bool:
        """Allow the attempt iff the user has a quota row with credits left."""
        quota = await self._quotas.get_by_user_async(user_id)
        if quota is None:
            self.logger.warning(f"No quota configured for user {user_id}")
            return False
        if not quota.has_credits:
            self.logger.info(
                f"Quota exhausted for user {user_id}: {quota.used_credits}/{quota.ai_credits}"
            )
            return False
        return True

    async def consume(self, user_id: str) -> None:
        """Record one used credit."""
        await self._quotas.increment_used_credits_async(user_id)
