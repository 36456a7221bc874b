"""
Tests for resumerank.core.quota_guard.
"""

import asyncio

import pytest

from resumerank.core.quota_guard import QuotaGuard


@pytest.fixture
def guard_and_quotas(pipeline):
    return QuotaGuard(pipeline.quotas), pipeline.quotas


class TestQuotaGuard:
    def test_admits_with_credits_left(self, guard_and_quotas):
        guard, quotas = guard_and_quotas
        quotas.set("u1", ai_credits=5, used_credits=4)
        assert asyncio.run(guard.admit("u1")) is True

    def test_denies_when_exhausted(self, guard_and_quotas):
        guard, quotas = guard_and_quotas
        quotas.set("u1", ai_credits=5, used_credits=5)
        assert asyncio.run(guard.admit("u1")) is False

    def test_denies_when_overdrawn(self, guard_and_quotas):
        guard, quotas = guard_and_quotas
        quotas.set("u1", ai_credits=5, used_credits=7)
        assert asyncio.run(guard.admit("u1")) is False

    def test_denies_without_quota_row(self, guard_and_quotas):
        guard, _ = guard_and_quotas
        assert asyncio.run(guard.admit("nobody")) is False

    def test_admit_does_not_reserve(self, guard_and_quotas):
        guard, quotas = guard_and_quotas
        quotas.set("u1", ai_credits=1, used_credits=0)

        async def admit_twice():
            return await guard.admit("u1"), await guard.admit("u1")

        assert asyncio.run(admit_twice()) == (True, True)
        assert quotas.quotas["u1"].used_credits == 0

    def test_consume_increments(self, guard_and_quotas):
        guard, quotas = guard_and_quotas
        quotas.set("u1", ai_credits=5, used_credits=2)
        asyncio.run(guard.consume("u1"))
        assert quotas.quotas["u1"].used_credits == 3
