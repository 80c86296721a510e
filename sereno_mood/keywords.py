"""
Static keyword configuration for mood assessment.

A lexicon is built once at import time and shared by every engine instance.
Matching is a plain heuristic: the text is lowercased and a keyword matches
wherever it begins a word. There is no stemming and no learned model.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


def _compile(keyword: str) -> re.Pattern[str]:
    return re.compile(r"(?<!\w)" + re.escape(keyword.lower()))


@dataclass(frozen=True)
class KeywordLexicon:
    """
    Keyword lists for one language.

    Attributes:
        positive_words: Words that push the text sentiment towards positive
        negative_words: Words that push the text sentiment towards negative
        emotion_categories: Ordered category name -> trigger keywords
        high_risk_phrases: Self-harm or suicidal language
        medium_risk_phrases: Hopelessness, worthlessness or isolation language
    """

    positive_words: tuple[str, ...]
    negative_words: tuple[str, ...]
    emotion_categories: Mapping[str, tuple[str, ...]]
    high_risk_phrases: tuple[str, ...]
    medium_risk_phrases: tuple[str, ...]

    _positive: tuple[re.Pattern[str], ...] = field(init=False, repr=False)
    _negative: tuple[re.Pattern[str], ...] = field(init=False, repr=False)
    _categories: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = field(
        init=False, repr=False
    )
    _high_risk: tuple[re.Pattern[str], ...] = field(init=False, repr=False)
    _medium_risk: tuple[re.Pattern[str], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # frozen dataclass, so cached fields go through object.__setattr__
        set_ = object.__setattr__
        set_(self, "emotion_categories", MappingProxyType(dict(self.emotion_categories)))
        set_(self, "_positive", tuple(map(_compile, self.positive_words)))
        set_(self, "_negative", tuple(map(_compile, self.negative_words)))
        set_(
            self,
            "_categories",
            tuple(
                (name, tuple(map(_compile, triggers)))
                for name, triggers in self.emotion_categories.items()
            ),
        )
        set_(self, "_high_risk", tuple(map(_compile, self.high_risk_phrases)))
        set_(self, "_medium_risk", tuple(map(_compile, self.medium_risk_phrases)))

    def count_positive(self, text: str) -> int:
        """Number of distinct positive words present in the text."""
        return _count(self._positive, text)

    def count_negative(self, text: str) -> int:
        """Number of distinct negative words present in the text."""
        return _count(self._negative, text)

    def categories_in(self, text: str) -> list[str]:
        """Names of the emotion categories triggered by the text, in order."""
        lowered = text.lower()
        return [
            name
            for name, patterns in self._categories
            if any(pattern.search(lowered) for pattern in patterns)
        ]

    def has_high_risk(self, text: str) -> bool:
        return _count(self._high_risk, text) > 0

    def has_medium_risk(self, text: str) -> bool:
        return _count(self._medium_risk, text) > 0


def _count(patterns: tuple[re.Pattern[str], ...], text: str) -> int:
    lowered = text.lower()
    return sum(1 for pattern in patterns if pattern.search(lowered))


SPANISH_LEXICON = KeywordLexicon(
    positive_words=(
        "feliz",
        "contento",
        "alegre",
        "bien",
        "genial",
        "excelente",
        "fantástico",
        "amor",
        "paz",
        "tranquilo",
        "relajado",
        "optimista",
        "esperanza",
        "gratitud",
    ),
    negative_words=(
        "triste",
        "deprimido",
        "ansioso",
        "preocupado",
        "estresado",
        "agobiado",
        "mal",
        "terrible",
        "horrible",
        "miedo",
        "pánico",
        "desesperado",
        "solo",
        "vacío",
        "perdido",
        "confundido",
        "frustrado",
        "enojado",
        "irritado",
    ),
    emotion_categories={
        "ansiedad": ("ansioso", "nervioso", "preocupado", "estresado", "agobiado"),
        "tristeza": ("triste", "deprimido", "melancólico", "desanimado"),
        "alegría": ("feliz", "contento", "alegre", "eufórico"),
        "miedo": ("miedo", "pánico", "terror", "asustado"),
        "ira": ("enojado", "furioso", "irritado", "molesto"),
        "confusión": ("confundido", "perdido", "desorientado"),
        "soledad": ("solo", "aislado", "abandonado"),
        "esperanza": ("esperanza", "optimista", "confiado"),
    },
    high_risk_phrases=(
        "suicidio",
        "matarme",
        "no quiero vivir",
        "acabar con todo",
        "desesperado",
        "sin salida",
        "no puedo más",
    ),
    medium_risk_phrases=(
        "deprimido",
        "muy triste",
        "sin esperanza",
        "vacío",
        "no sirvo",
        "inútil",
        "solo",
        "abandonado",
    ),
)
