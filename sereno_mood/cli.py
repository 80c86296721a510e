"""
Command-line interface tools for the SERENO mood assessment service.
"""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from dotenv import load_dotenv
from httpx_sse import ServerSentEvent, aconnect_sse

from .config import DEFAULT_BASE_URL
from .engine import MoodAssessmentEngine
from .errors import SubmissionValidationError
from .models import MoodAnalysisResult, MoodEntry, RiskLevel

DEFAULT_USER = "anonymous"

app = typer.Typer(help="SERENO mood assessment CLI tools")


@app.callback()
def main() -> None:
    """SERENO mood assessment CLI tools."""
    # make .env values visible to the --url envvar fallback
    load_dotenv()


# MARK: - CLI Entry Points


def cli_analyze() -> None:
    """Entry point for mood-analyze CLI command."""
    typer.run(analyze)


def cli_stream() -> None:
    """Entry point for mood-alerts CLI command."""
    load_dotenv()
    typer.run(stream)


# MARK: - Commands


@app.command()
def analyze(
    emotion_id: str = typer.Option(..., "--emotion-id", "-e", help="Emotion identifier"),
    label: str = typer.Option(..., "--label", "-l", help="Emotion label"),
    intensity: int = typer.Option(..., "--intensity", "-i", help="Intensity from 1 to 5"),
    text: str | None = typer.Option(None, "--text", "-t", help="Free-text description"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Analyze a mood locally, without contacting the service."""
    payload = _build_payload(emotion_id, label, intensity, text)
    try:
        result = MoodAssessmentEngine().analyze_payload(payload)
    except SubmissionValidationError as e:
        for detail in e.details:
            print(f"Error: {detail['field']}: {detail['message']}")
        raise typer.Exit(1)

    if json_output:
        print(result.model_dump_json(by_alias=True, indent=2))
        return

    print(_format_analysis(result))


@app.command()
def submit(
    emotion_id: str = typer.Option(..., "--emotion-id", "-e", help="Emotion identifier"),
    label: str = typer.Option(..., "--label", "-l", help="Emotion label"),
    intensity: int = typer.Option(..., "--intensity", "-i", help="Intensity from 1 to 5"),
    text: str | None = typer.Option(None, "--text", "-t", help="Free-text description"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="User identity"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL,
        "--url",
        envvar="SERENO_BASE_URL",
        help="Base URL of the SERENO mood service",
    ),
) -> None:
    """Submit a mood assessment to the service and store it."""

    async def _submit() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{base_url}/mood/assessment",
                json=_build_payload(emotion_id, label, intensity, text),
                headers={"X-User-Id": user},
            )
            if response.status_code == 400:
                _print_validation_errors(response.json())
                raise typer.Exit(1)
            response.raise_for_status()

            entry = MoodEntry.model_validate(response.json()["data"])
            print(f"Stored entry {entry.id}")
            print(_format_analysis(entry.analysis_result))

    _run_with_error_handling(_submit(), base_url)


@app.command()
def history(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="User identity"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of entries"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL,
        "--url",
        envvar="SERENO_BASE_URL",
        help="Base URL of the SERENO mood service",
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Show the most recent mood entries of a user."""

    async def _history() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{base_url}/mood/history",
                params={"limit": limit},
                headers={"X-User-Id": user},
            )
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2, ensure_ascii=False))
                return

            entries = result["data"]["entries"]
            if not entries:
                print("No mood entries")
                return
            for raw in entries:
                print(_format_entry(MoodEntry.model_validate(raw)))

    _run_with_error_handling(_history(), base_url)


@app.command()
def trends(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="User identity"),
    days: int = typer.Option(30, "--days", "-d", help="Window size in days"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL,
        "--url",
        envvar="SERENO_BASE_URL",
        help="Base URL of the SERENO mood service",
    ),
) -> None:
    """Show mood trends of a user."""

    async def _trends() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{base_url}/mood/trends",
                params={"days": days},
                headers={"X-User-Id": user},
            )
            response.raise_for_status()
            data = response.json()["data"]

            print(f"Entries (last {data['days']} days): {data['totalEntries']}")
            print(f"Average intensity: {data['averageIntensity']:.2f}")
            print(f"Sentiment: {_format_counts(data['sentimentDistribution'])}")
            print(f"Risk: {_format_counts(data['riskLevelDistribution'])}")

    _run_with_error_handling(_trends(), base_url)


@app.command()
def stream(
    risk: RiskLevel = typer.Option(
        RiskLevel.HIGH, "--risk", "-r", help="Minimum risk level to show"
    ),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL,
        "--url",
        envvar="SERENO_BASE_URL",
        help="Base URL of the SERENO mood service",
    ),
) -> None:
    """Follow newly stored mood entries in real-time."""

    async def _stream() -> None:
        url = f"{base_url}/mood/stream"
        print(f"Streaming from {url} (risk >= {risk.value})... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(
                client, "GET", url, params={"risk": risk.value}
            ) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_stream(), base_url)


@app.command()
def serve() -> None:
    """Run the SERENO mood service."""
    from .server import main

    main()


# MARK: - Private Helpers


def _build_payload(
    emotion_id: str, label: str, intensity: int, text: str | None
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "selectedEmotion": {"id": emotion_id, "label": label, "intensity": intensity}
    }
    if text is not None:
        payload["textDescription"] = text
    return payload


def _format_analysis(result: MoodAnalysisResult) -> str:
    lines = [
        f"Sentiment: {result.overall_sentiment.value}",
        f"Consistency: {result.emotion_consistency.value}",
        f"Risk: {result.risk_level.value}",
        f"Confidence: {result.confidence_score:.2f}",
        f"Key emotions: {', '.join(result.key_emotions)}",
        "Recommendations:",
        *(f"  - {item}" for item in result.recommendations),
        "Follow-up:",
        *(f"  - {item}" for item in result.follow_up_suggestions),
    ]
    return "\n".join(lines)


def _format_entry(entry: MoodEntry) -> str:
    """Format a stored entry as a single line."""
    timestamp = entry.created_at.strftime("%Y-%m-%d %H:%M:%S")
    analysis = entry.analysis_result
    return (
        f"{timestamp} > {entry.selected_emotion.label} "
        f"({entry.selected_emotion.intensity}) "
        f"sentiment={analysis.overall_sentiment.value} "
        f"risk={analysis.risk_level.value}"
    )


def _format_counts(counts: dict[str, int]) -> str:
    return ", ".join(f"{key}={value}" for key, value in counts.items())


def _print_validation_errors(body: dict[str, Any]) -> None:
    error = body.get("error", {})
    print(f"Error: {error.get('message', 'Invalid request')}")
    for detail in error.get("details", []):
        print(f"  {detail['field']}: {detail['message']}")


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        # Handle error events from server
        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        entry = MoodEntry.model_validate_json(sse.data)
        print(f"[{entry.user_id}] {_format_entry(entry)}")

    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except typer.Exit:
        raise
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
