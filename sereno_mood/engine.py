"""
Rule-based mood assessment engine.

The engine turns a mood submission (selected emotion plus optional text) into
a structured analysis: sentiment, consistency, confidence, risk level,
recommendations and follow-up suggestions. It is a pure function of its
input and the keyword lexicon it was built with; it performs no I/O and
keeps no state between calls.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from .errors import SubmissionValidationError
from .keywords import SPANISH_LEXICON, KeywordLexicon
from .models import (
    EmotionConsistency,
    MoodAnalysisResult,
    MoodSubmission,
    RiskLevel,
    Sentiment,
)

# MARK: - Message catalog

RISK_RECOMMENDATIONS: Mapping[RiskLevel, tuple[str, ...]] = MappingProxyType({
    RiskLevel.HIGH: (
        "Considera contactar inmediatamente con un profesional de salud mental",
        "Usa el botón de pánico si necesitas ayuda urgente",
        "Habla con un SERENO de confianza",
    ),
    RiskLevel.MEDIUM: (
        "Prueba algunos ejercicios de respiración para calmarte",
        "Considera hablar con un SERENO o amigo de confianza",
        "Dedica tiempo a actividades que te relajen",
    ),
    RiskLevel.LOW: (),
})

SENTIMENT_RECOMMENDATIONS: Mapping[Sentiment, tuple[str, ...]] = MappingProxyType({
    Sentiment.NEGATIVE: (
        "Intenta hacer una actividad que disfrutes",
        "Sal a caminar o haz ejercicio ligero",
        "Practica técnicas de mindfulness",
    ),
    Sentiment.POSITIVE: (
        "¡Mantén esa energía positiva!",
        "Comparte tu bienestar con otros en la comunidad",
        "Considera ayudar a otros que puedan necesitar apoyo",
    ),
    Sentiment.NEUTRAL: (),
})

NEUTRAL_INTENSITY_RECOMMENDATIONS: tuple[str, ...] = (
    "Explora qué actividades podrían mejorar tu ánimo",
    "Mantén una rutina saludable de sueño y alimentación",
)

RISK_FOLLOW_UPS: Mapping[RiskLevel, tuple[str, ...]] = MappingProxyType({
    RiskLevel.HIGH: (
        "Seguimiento diario recomendado",
        "Contacto con profesional en 24-48 horas",
    ),
    RiskLevel.MEDIUM: (
        "Seguimiento en 2-3 días",
        "Monitorear cambios en el estado de ánimo",
    ),
    RiskLevel.LOW: ("Seguimiento semanal",),
})

INCONSISTENT_FOLLOW_UPS: tuple[str, ...] = (
    "Explorar más a fondo los sentimientos mixtos",
    "Considerar una evaluación más detallada",
)

POSITIVE_FOLLOW_UPS: tuple[str, ...] = (
    "Continuar con las actividades que generan bienestar",
)

NEUTRAL_INTENSITY = 3
EXTREME_INTENSITIES = frozenset({1, 5})


class MoodAssessmentEngine:
    """
    Classifies mood submissions with static keyword rules.

    One instance can be shared freely: the lexicon is immutable and
    ``analyze`` does not touch instance state.
    """

    def __init__(self, lexicon: KeywordLexicon = SPANISH_LEXICON) -> None:
        self.lexicon = lexicon

    def analyze(self, submission: MoodSubmission) -> MoodAnalysisResult:
        """
        Analyze a validated submission.

        Args:
            submission: The mood check-in to classify

        Returns:
            A new MoodAnalysisResult
        """
        intensity = submission.selected_emotion.intensity
        text = submission.text

        text_sentiment = self.text_sentiment(text) if text is not None else None
        overall = overall_sentiment(intensity, text_sentiment)
        consistency = emotion_consistency(intensity, text_sentiment)
        risk = self.risk_level(intensity, text_sentiment, text)

        key_emotions = [submission.selected_emotion.label]
        if text is not None:
            key_emotions.extend(self.lexicon.categories_in(text))

        return MoodAnalysisResult(
            overall_sentiment=overall,
            emotion_consistency=consistency,
            key_emotions=list(dict.fromkeys(key_emotions)),
            confidence_score=confidence_score(intensity, text is not None, consistency),
            risk_level=risk,
            recommendations=recommendations(overall, intensity, risk),
            follow_up_suggestions=follow_up_suggestions(overall, risk, consistency),
        )

    def analyze_payload(self, payload: Mapping[str, Any]) -> MoodAnalysisResult:
        """
        Validate a raw JSON-shaped payload, then analyze it.

        Raises:
            SubmissionValidationError: If the payload is malformed
        """
        try:
            submission = MoodSubmission.model_validate(payload)
        except ValidationError as e:
            raise SubmissionValidationError.from_errors(
                e.errors(), "Invalid mood assessment data"
            ) from e
        return self.analyze(submission)

    def text_sentiment(self, text: str) -> Sentiment:
        positive = self.lexicon.count_positive(text)
        negative = self.lexicon.count_negative(text)
        if positive > negative:
            return Sentiment.POSITIVE
        if negative > positive:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL

    def risk_level(
        self, intensity: int, text_sentiment: Sentiment | None, text: str | None
    ) -> RiskLevel:
        """Risk phrases in the text win over anything the intensity says."""
        if text is not None:
            if self.lexicon.has_high_risk(text):
                return RiskLevel.HIGH
            if self.lexicon.has_medium_risk(text):
                return RiskLevel.MEDIUM

        if intensity == 1 and text_sentiment is Sentiment.NEGATIVE:
            return RiskLevel.MEDIUM
        if intensity <= 2:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


# MARK: - Rules


def intensity_sentiment(intensity: int) -> Sentiment:
    """Sentiment implied by the selected intensity alone."""
    if intensity <= 2:
        return Sentiment.NEGATIVE
    if intensity >= 4:
        return Sentiment.POSITIVE
    return Sentiment.NEUTRAL


def overall_sentiment(intensity: int, text_sentiment: Sentiment | None) -> Sentiment:
    expected = intensity_sentiment(intensity)
    if text_sentiment is None or text_sentiment is expected:
        return expected
    if Sentiment.NEGATIVE in (expected, text_sentiment):
        return Sentiment.NEGATIVE
    return Sentiment.POSITIVE


def emotion_consistency(
    intensity: int, text_sentiment: Sentiment | None
) -> EmotionConsistency:
    if text_sentiment is None:
        return EmotionConsistency.UNCLEAR

    expected = intensity_sentiment(intensity)
    # neutral intensity tolerates any text tone
    if expected is text_sentiment or expected is Sentiment.NEUTRAL:
        return EmotionConsistency.CONSISTENT
    return EmotionConsistency.INCONSISTENT


def confidence_score(
    intensity: int, has_text: bool, consistency: EmotionConsistency
) -> float:
    """
    Confidence in the analysis, in [0, 1].

    Accumulated in integer tenths, then divided once.
    """
    tenths = 5
    if has_text:
        tenths += 2

    if consistency is EmotionConsistency.CONSISTENT:
        tenths += 2
    elif consistency is EmotionConsistency.INCONSISTENT:
        tenths -= 1

    # an extreme pick only counts as unambiguous if the text doesn't contradict it
    if (
        intensity in EXTREME_INTENSITIES
        and consistency is not EmotionConsistency.INCONSISTENT
    ):
        tenths += 1

    return max(0, min(10, tenths)) / 10


def recommendations(
    overall: Sentiment, intensity: int, risk: RiskLevel
) -> list[str]:
    items = [*RISK_RECOMMENDATIONS[risk], *SENTIMENT_RECOMMENDATIONS[overall]]
    if intensity == NEUTRAL_INTENSITY:
        items.extend(NEUTRAL_INTENSITY_RECOMMENDATIONS)
    return items


def follow_up_suggestions(
    overall: Sentiment, risk: RiskLevel, consistency: EmotionConsistency
) -> list[str]:
    items = list(RISK_FOLLOW_UPS[risk])
    if consistency is EmotionConsistency.INCONSISTENT:
        items.extend(INCONSISTENT_FOLLOW_UPS)
    if overall is Sentiment.POSITIVE:
        items.extend(POSITIVE_FOLLOW_UPS)
    return items
