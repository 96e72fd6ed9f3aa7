"""Tests for the decaying rate signal."""

import asyncio

import pytest

from higgs.clients.rate_limiter import RateLimiter


class TestCounter:
    """Tests for increase/decay arithmetic."""

    def test_starts_at_zero(self):
        limiter = RateLimiter()
        assert limiter.value() == 0

    def test_three_increases_then_three_ticks(self):
        """Three signals raise the value to 3; three ticks bring it back to 0."""
        limiter = RateLimiter()
        for _ in range(3):
            limiter.increase()
        assert limiter.value() == 3

        for _ in range(3):
            limiter.tick()
        assert limiter.value() == 0

    def test_never_goes_negative(self):
        limiter = RateLimiter()
        limiter.increase()
        for _ in range(5):
            limiter.tick()
        limiter.decrease()
        assert limiter.value() == 0

    def test_status_tracks_lifetime_increases(self):
        limiter = RateLimiter()
        limiter.increase()
        limiter.increase()
        limiter.tick()

        status = limiter.get_status()
        assert status["value"] == 1
        assert status["total_increases"] == 2
        assert status["running"] is False


class TestDecayTask:
    """Tests for the background decay lifetime."""

    @pytest.mark.asyncio
    async def test_background_decay(self):
        limiter = RateLimiter(decay_interval=0.01)
        for _ in range(3):
            limiter.increase()

        limiter.start()
        try:
            await asyncio.sleep(0.2)
            assert limiter.value() == 0
        finally:
            await limiter.stop()

    @pytest.mark.asyncio
    async def test_context_manager_stops_task(self):
        async with RateLimiter(decay_interval=0.01) as limiter:
            assert limiter.running

        assert not limiter.running

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self):
        limiter = RateLimiter()
        await limiter.stop()
        assert not limiter.running

    @pytest.mark.asyncio
    async def test_no_decay_after_stop(self):
        limiter = RateLimiter(decay_interval=0.01)
        limiter.start()
        await limiter.stop()

        limiter.increase()
        await asyncio.sleep(0.05)
        assert limiter.value() == 1
