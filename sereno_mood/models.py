"""
Shared data models for the SERENO mood assessment service.

This module defines the core domain models used across multiple layers
of the application (assessment engine, history store, CLI, API). Fields are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_TEXT_LENGTH = 1000


class Sentiment(str, Enum):
    """Tone of a submission, from the selected intensity or the text."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class EmotionConsistency(str, Enum):
    """Whether the text tone agrees with the selected emotion intensity."""

    CONSISTENT = "consistent"
    INCONSISTENT = "inconsistent"
    UNCLEAR = "unclear"


class RiskLevel(str, Enum):
    """Coarse triage signal, ordered from least to most urgent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SelectedEmotion(_WireModel):
    """
    The emotion picked by the user on the mood scale.

    UI-only metadata (emoji, color, description) is kept as extra fields and
    ignored by the engine.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1, description="Emotion identifier")
    label: str = Field(..., min_length=1, description="Display label")
    intensity: int = Field(..., ge=1, le=5, description="1=very sad, 5=very happy")

    @field_validator("intensity", mode="before")
    @classmethod
    def reject_bool_intensity(cls, value):
        # bool is an int subclass; true would pass as 1
        if isinstance(value, bool):
            raise ValueError("intensity must be an integer between 1 and 5")
        return value


class MoodSubmission(_WireModel):
    """A single mood check-in as sent by the client."""

    selected_emotion: SelectedEmotion
    text_description: str | None = Field(None, max_length=MAX_TEXT_LENGTH)
    voice_recording_url: str | None = None

    @property
    def text(self) -> str | None:
        """The description, or None when missing or empty."""
        if not self.text_description:
            return None
        return self.text_description


class MoodAnalysisResult(_WireModel):
    """Outcome of analyzing one submission. Never mutated once created."""

    overall_sentiment: Sentiment
    emotion_consistency: EmotionConsistency
    key_emotions: list[str]
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    risk_level: RiskLevel
    recommendations: list[str]
    follow_up_suggestions: list[str]


class MoodEntry(_WireModel):
    """A submission and its analysis, as stored in a user's mood history."""

    id: str
    user_id: str
    selected_emotion: SelectedEmotion
    text_description: str | None = None
    voice_recording_url: str | None = None
    analysis_result: MoodAnalysisResult
    created_at: datetime


class MoodTrends(_WireModel):
    """Aggregate statistics over a window of a user's mood history."""

    average_intensity: float = 0.0
    sentiment_distribution: dict[Sentiment, int]
    risk_level_distribution: dict[RiskLevel, int]
    total_entries: int = 0
    days: int
