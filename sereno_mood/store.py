"""
Mood history storage for the SERENO mood assessment service.

This module provides an in-memory, append-only mood history that supports
per-user reads, trend aggregation and real-time streaming of new entries to
multiple subscribers. Entries are never updated or deleted. The design allows
for easy replacement with a persistent backend later.
"""

import asyncio
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from .models import (
    MoodAnalysisResult,
    MoodEntry,
    MoodSubmission,
    MoodTrends,
    RiskLevel,
    Sentiment,
)

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_TREND_DAYS = 30


class MoodHistoryStore:
    """
    In-memory append-only mood log with real-time streaming capabilities.

    All entries live in a single ordered log; each subscriber keeps its own
    cursor into it and waits on a shared condition for new appends. All
    operations are safe under concurrent use through asyncio primitives.
    """

    def __init__(self) -> None:
        self._entries: list[MoodEntry] = []
        self._condition = asyncio.Condition()

    async def append(
        self,
        user_id: str,
        submission: MoodSubmission,
        result: MoodAnalysisResult,
        created_at: datetime | None = None,
    ) -> MoodEntry:
        """
        Store a submission with its analysis and notify all subscribers.

        Args:
            user_id: Identity of the submitting user
            submission: The validated mood submission
            result: The analysis produced for it
            created_at: Override for the entry timestamp (defaults to now, UTC)

        Returns:
            The stored MoodEntry
        """
        async with self._condition:
            entry = MoodEntry(
                id=uuid.uuid4().hex,
                user_id=user_id,
                selected_emotion=submission.selected_emotion,
                text_description=submission.text_description,
                voice_recording_url=submission.voice_recording_url,
                analysis_result=result,
                created_at=created_at or datetime.now(timezone.utc),
            )
            self._entries.append(entry)

            # Wake every waiting subscriber
            self._condition.notify_all()

            return entry

    async def history(
        self, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[MoodEntry]:
        """
        Get a user's most recent entries.

        Returns:
            At most ``limit`` entries, newest first
        """
        async with self._condition:
            own = [entry for entry in reversed(self._entries) if entry.user_id == user_id]
        return own[:limit]

    async def trends(
        self,
        user_id: str,
        days: int = DEFAULT_TREND_DAYS,
        now: datetime | None = None,
    ) -> MoodTrends:
        """
        Aggregate a user's entries from the last ``days`` days.

        Returns:
            Average intensity plus sentiment and risk level distributions
        """
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        async with self._condition:
            window = [
                entry
                for entry in self._entries
                if entry.user_id == user_id and entry.created_at >= since
            ]

        sentiments = dict.fromkeys(Sentiment, 0)
        risks = dict.fromkeys(RiskLevel, 0)
        for entry in window:
            sentiments[entry.analysis_result.overall_sentiment] += 1
            risks[entry.analysis_result.risk_level] += 1

        average = 0.0
        if window:
            average = sum(e.selected_emotion.intensity for e in window) / len(window)

        return MoodTrends(
            average_intensity=average,
            sentiment_distribution=sentiments,
            risk_level_distribution=risks,
            total_entries=len(window),
            days=days,
        )

    def subscribe(
        self,
        user_id: str | None = None,
        min_risk: RiskLevel = RiskLevel.LOW,
    ) -> AsyncGenerator[MoodEntry, None]:
        """
        Subscribe to entries appended from now on.

        The cursor is fixed when this is called, not when iteration starts,
        so entries appended in between are still delivered.

        Args:
            user_id: Only yield entries of this user (all users if None)
            min_risk: Only yield entries at or above this risk level

        Returns:
            An async generator of MoodEntry objects
        """

        def wanted(entry: MoodEntry) -> bool:
            if user_id is not None and entry.user_id != user_id:
                return False
            return entry.analysis_result.risk_level.rank >= min_risk.rank

        start = len(self._entries)

        async def entry_generator() -> AsyncGenerator[MoodEntry, None]:
            cursor = start
            try:
                while True:
                    async with self._condition:
                        await self._condition.wait_for(
                            lambda: len(self._entries) > cursor
                        )
                        fresh = self._entries[cursor:]
                        cursor = len(self._entries)

                    for entry in fresh:
                        if wanted(entry):
                            yield entry

            except (asyncio.CancelledError, GeneratorExit):
                # Subscriber disconnected or generator closed
                return

        return entry_generator()

    @asynccontextmanager
    async def stream(
        self,
        user_id: str | None = None,
        min_risk: RiskLevel = RiskLevel.LOW,
    ) -> AsyncGenerator[AsyncGenerator[MoodEntry, None], None]:
        """
        Stream entries appended after entering the context.

        Yields:
            An async generator of MoodEntry objects, closed on exit
        """
        entries = self.subscribe(user_id=user_id, min_risk=min_risk)
        try:
            yield entries
        finally:
            await entries.aclose()
