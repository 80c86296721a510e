"""
Tests for the MoodHistoryStore implementation.

These tests verify the core functionality of the mood history, including
appends, per-user reads, trend aggregation and streaming of new entries.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sereno_mood.engine import MoodAssessmentEngine
from sereno_mood.models import MoodSubmission, RiskLevel, Sentiment
from sereno_mood.store import MoodHistoryStore


def make_submission(intensity: int, text: str | None = None, label: str = "Emoción"):
    payload = {"selectedEmotion": {"id": label.lower(), "label": label, "intensity": intensity}}
    if text is not None:
        payload["textDescription"] = text
    return MoodSubmission.model_validate(payload)


class TestMoodHistoryStore:
    """Test suite for MoodHistoryStore functionality."""

    def setup_method(self):
        """Set up a fresh store and engine for each test."""
        self.store = MoodHistoryStore()
        self.engine = MoodAssessmentEngine()

    async def record(self, user_id: str, submission: MoodSubmission, **kwargs):
        return await self.store.append(
            user_id, submission, self.engine.analyze(submission), **kwargs
        )

    async def test_initial_state(self):
        """Test that a new store has no history."""
        assert await self.store.history("user-1") == []
        trends = await self.store.trends("user-1")
        assert trends.total_entries == 0
        assert trends.average_intensity == 0.0

    async def test_append_and_history(self):
        """Test that entries are stored and read back newest first."""
        first = await self.record("user-1", make_submission(4, "Buen día", "Contento"))
        second = await self.record("user-1", make_submission(2, "Día difícil", "Triste"))

        assert first.id != second.id
        assert first.user_id == "user-1"
        assert first.text_description == "Buen día"
        assert first.created_at.tzinfo is not None

        entries = await self.store.history("user-1")
        assert [entry.id for entry in entries] == [second.id, first.id]
        assert entries[0].analysis_result.risk_level is RiskLevel.MEDIUM

    async def test_history_limit_and_isolation(self):
        """Test the limit parameter and that users only see their own entries."""
        await self.record("user-1", make_submission(4))
        await self.record("user-1", make_submission(3))
        await self.record("user-2", make_submission(5))

        limited = await self.store.history("user-1", limit=1)
        assert len(limited) == 1
        assert limited[0].selected_emotion.intensity == 3

        assert len(await self.store.history("user-2")) == 1
        assert await self.store.history("user-3") == []

    async def test_trends(self):
        """Test trend aggregation over a user's entries."""
        await self.record("user-1", make_submission(4, "Buen día", "Contento"))
        await self.record("user-1", make_submission(2, "Día difícil", "Triste"))
        await self.record("user-1", make_submission(3, label="Neutral"))

        trends = await self.store.trends("user-1", days=30)

        assert trends.total_entries == 3
        assert trends.average_intensity == 3.0
        assert trends.sentiment_distribution == {
            Sentiment.POSITIVE: 1,
            Sentiment.NEUTRAL: 1,
            Sentiment.NEGATIVE: 1,
        }
        assert trends.risk_level_distribution == {
            RiskLevel.LOW: 2,
            RiskLevel.MEDIUM: 1,
            RiskLevel.HIGH: 0,
        }

    async def test_trends_window(self):
        """Test that entries older than the window are left out."""
        now = datetime.now(timezone.utc)
        await self.record(
            "user-1", make_submission(1), created_at=now - timedelta(days=10)
        )
        await self.record("user-1", make_submission(4), created_at=now - timedelta(days=1))

        trends = await self.store.trends("user-1", days=7, now=now)
        assert trends.total_entries == 1
        assert trends.average_intensity == 4.0
        assert trends.days == 7

    async def test_streaming(self):
        """Test that two consumers receive entries appended after subscribing."""
        await self.record("user-1", make_submission(3))

        consumer1_entries = []
        consumer2_entries = []

        async def consumer1():
            async with self.store.stream() as entries:
                async for entry in entries:
                    consumer1_entries.append(entry.selected_emotion.label)
                    if len(consumer1_entries) >= 2:
                        break

        async def consumer2():
            async with self.store.stream(min_risk=RiskLevel.HIGH) as entries:
                async for entry in entries:
                    consumer2_entries.append(entry.selected_emotion.label)
                    break

        task1 = asyncio.create_task(consumer1())
        task2 = asyncio.create_task(consumer2())

        # Let them subscribe
        await asyncio.sleep(0.01)

        await self.record("user-1", make_submission(4, label="Contento"))
        await asyncio.sleep(0.01)
        await self.record("user-2", make_submission(1, "No quiero vivir", "Muy triste"))

        try:
            await asyncio.wait_for(asyncio.gather(task1, task2), timeout=2.0)
        except TimeoutError:
            task1.cancel()
            task2.cancel()
            await asyncio.gather(task1, task2, return_exceptions=True)
            assert False, (
                f"Test timed out. Consumer1 got: {consumer1_entries}, "
                f"Consumer2 got: {consumer2_entries}"
            )

        assert consumer1_entries == ["Contento", "Muy triste"]
        assert consumer2_entries == ["Muy triste"]

    async def test_streaming_user_filter(self):
        """Test that a user-scoped stream skips other users' entries."""
        received = []

        async def consumer():
            async with self.store.stream(user_id="user-2") as entries:
                async for entry in entries:
                    received.append(entry.user_id)
                    break

        task = asyncio.create_task(consumer())
        await asyncio.sleep(0.01)

        await self.record("user-1", make_submission(4))
        await self.record("user-2", make_submission(4))

        await asyncio.wait_for(task, timeout=2.0)
        assert received == ["user-2"]

    async def test_subscription_starts_before_iteration(self):
        """Test that entries appended between subscribing and reading are delivered."""
        await self.record("user-1", make_submission(3))

        entries = self.store.subscribe(min_risk=RiskLevel.HIGH)
        stored = await self.record("user-2", make_submission(1, "No quiero vivir"))

        try:
            entry = await asyncio.wait_for(anext(entries), timeout=2.0)
        finally:
            await entries.aclose()

        assert entry.id == stored.id
        assert entry.analysis_result.risk_level is RiskLevel.HIGH
