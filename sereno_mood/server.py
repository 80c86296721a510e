"""
FastAPI server for the SERENO mood assessment service.

This module implements the HTTP API: mood submissions are validated, analyzed
by the assessment engine and appended to the user's mood history. History,
trends and a Server-Sent Events stream of new entries (used by alerting
systems to watch for high-risk submissions) are exposed as read paths.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from . import __version__
from .config import configure_logging, load_settings
from .engine import MoodAssessmentEngine
from .errors import SubmissionValidationError, field_details
from .models import MoodAnalysisResult, MoodEntry, MoodSubmission, MoodTrends, RiskLevel
from .store import DEFAULT_HISTORY_LIMIT, DEFAULT_TREND_DAYS, MoodHistoryStore

logger = logging.getLogger(__name__)

UserId = Annotated[str, Header(alias="X-User-Id", min_length=1)]


# API Response Schemas
class AssessmentResponse(BaseModel):
    """Response for a stored mood assessment."""

    success: bool = True
    message: str = "Mood assessment completed successfully"
    data: MoodEntry


class AnalysisResponse(BaseModel):
    """Response for an analysis that was not stored."""

    success: bool = True
    message: str = "Mood analysis completed"
    data: MoodAnalysisResult


class HistoryPage(BaseModel):
    entries: list[MoodEntry]
    total: int


class HistoryResponse(BaseModel):
    success: bool = True
    data: HistoryPage


class TrendsResponse(BaseModel):
    success: bool = True
    data: MoodTrends


def create_app(
    mood_store: MoodHistoryStore, engine: MoodAssessmentEngine | None = None
) -> FastAPI:
    """
    Create a FastAPI application with the given mood history store.

    Args:
        mood_store: The MoodHistoryStore instance to use for the application
        engine: The assessment engine (defaults to the Spanish lexicon engine)

    Returns:
        Configured FastAPI application
    """
    engine = engine or MoodAssessmentEngine()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        logger.info("SERENO mood service starting")
        yield
        logger.info("SERENO mood service stopped")

    app = FastAPI(
        title="SERENO Mood",
        description="Mood assessment and history service for SERENO",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = SubmissionValidationError(
            "Invalid request data", field_details(exc.errors())
        )
        return JSONResponse(status_code=400, content=error.to_payload())

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "sereno-mood"}

    @app.post("/mood/assessment", status_code=201)
    async def submit_assessment(
        submission: MoodSubmission, user_id: UserId
    ) -> AssessmentResponse:
        """
        Analyze a mood submission and append it to the user's history.

        Returns:
            The stored entry, including its analysis result
        """
        result = engine.analyze(submission)
        entry = await mood_store.append(user_id, submission, result)

        logger.info(
            "Stored mood entry %s for user %s (risk=%s)",
            entry.id,
            user_id,
            result.risk_level.value,
        )
        if result.risk_level is RiskLevel.HIGH:
            logger.warning("High-risk mood entry %s for user %s", entry.id, user_id)

        return AssessmentResponse(data=entry)

    @app.post("/mood/analyze")
    async def analyze_mood(submission: MoodSubmission) -> AnalysisResponse:
        """Analyze a mood submission without storing it."""
        return AnalysisResponse(data=engine.analyze(submission))

    @app.get("/mood/history")
    async def get_history(
        user_id: UserId,
        limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryResponse:
        """
        Get the user's most recent mood entries.

        Returns:
            Entries newest first, at most ``limit`` of them
        """
        entries = await mood_store.history(user_id, limit=limit)
        return HistoryResponse(data=HistoryPage(entries=entries, total=len(entries)))

    @app.get("/mood/trends")
    async def get_trends(
        user_id: UserId,
        days: Annotated[int, Query(ge=1, le=365)] = DEFAULT_TREND_DAYS,
    ) -> TrendsResponse:
        """Aggregate the user's mood history over the last ``days`` days."""
        trends = await mood_store.trends(user_id, days=days)
        return TrendsResponse(data=trends)

    @app.get("/mood/stream")
    async def stream_entries(
        risk: RiskLevel = RiskLevel.LOW,
        user: str | None = None,
    ) -> StreamingResponse:
        """
        Stream newly stored mood entries via Server-Sent Events.

        Args:
            risk: Minimum risk level to forward (``high`` for alerting)
            user: Only forward entries of this user

        Returns:
            StreamingResponse with text/event-stream content type
        """

        # subscribe before the response starts so no entry is missed
        entries = mood_store.subscribe(user_id=user, min_risk=risk)

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for stored mood entries."""
            try:
                async for entry in entries:
                    data = entry.model_dump_json(by_alias=True)
                    yield f"data: {data}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception as e:
                logger.exception("Mood stream failed")
                error_data = json.dumps({"error": str(e)})
                yield f"event: error\ndata: {error_data}\n\n"
            finally:
                await entries.aclose()

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    return app


# Default app instance used by uvicorn
app = create_app(MoodHistoryStore())


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "sereno_mood.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
