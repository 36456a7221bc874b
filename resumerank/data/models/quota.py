"""
AI credit quota model for ResumeRank.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import BaseDocument


class UserQuota(BaseDocument):
    """
    Per-user allotment of AI analysis credits.

    ``used_credits <= ai_credits`` is only enforced when an analysis is
    admitted; credits are replenished outside this package.
    """

    user_id: str
    ai_credits: int = Field(default=100, ge=0)
    used_credits: int = Field(default=0, ge=0)
    reset_at: Optional[datetime] = None

    @property
    def remaining_credits(self) -> int:
        return max(0, self.ai_credits - self.used_credits)

    @property
    def has_credits(self) -> bool:
        return self.used_credits < self.ai_credits

    class Settings:
        """MongoDB collection settings."""

        name = "user_quotas"
        indexes = ["user_id"]
