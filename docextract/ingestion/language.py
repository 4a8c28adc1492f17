"""Statistical language identification and canonical language mapping."""

from __future__ import annotations

import logging
from typing import Optional, Union

from langdetect.detector_factory import PROFILES_DIRECTORY, DetectorFactory
from langdetect.lang_detect_exception import LangDetectException

from .metadata import CONTENT_LANGUAGE, Metadata
from .models import Language

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.9
DEFAULT_MAX_TEXT_LENGTH = 10_000
DEFAULT_SEED = 0

_SUPPORTED = frozenset({Language.ENGLISH, Language.SPANISH, Language.FRENCH, Language.GERMAN})
_SPANISH_FAMILY = frozenset({Language.GALICIAN, Language.CATALAN})


def normalize_language(language: Union[Language, str, None]) -> Language:
    """Map any detected language onto the four languages handled downstream.

    Galician and Catalan become Spanish; anything else, including codes the
    enumeration does not know, becomes English.
    """

    parsed = language if isinstance(language, Language) else Language.parse(language)
    if parsed in _SUPPORTED:
        return parsed
    if parsed in _SPANISH_FAMILY:
        return Language.SPANISH
    return Language.ENGLISH


class LanguageDetector:
    """n-gram profile language identifier backed by ``langdetect``.

    Profiles are loaded once into a private factory; each call builds a fresh
    detector, so a single instance can be shared between workers.
    """

    def __init__(
        self,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
        seed: Optional[int] = DEFAULT_SEED,
    ) -> None:
        self._min_confidence = min_confidence
        self._max_text_length = max_text_length
        self._factory = DetectorFactory()
        self._factory.load_profile(PROFILES_DIRECTORY)
        if seed is not None:
            self._factory.set_seed(seed)

    @property
    def min_confidence(self) -> float:
        return self._min_confidence

    def detect(self, text: str) -> Optional[str]:
        """Return the best language code, or ``None`` without a confident guess."""

        if not text or not text.strip():
            return None

        detector = self._factory.create()
        detector.set_max_text_length(self._max_text_length)
        detector.append(text)
        try:
            probabilities = detector.get_probabilities()
        except LangDetectException as exc:
            logger.debug("Language detection inconclusive: %s", exc)
            return None

        if not probabilities:
            return None
        best = probabilities[0]
        if best.prob < self._min_confidence:
            logger.debug("Best language guess %s below confidence (%.3f)", best.lang, best.prob)
            return None
        return best.lang


def apply_detected_language(detector: LanguageDetector, content: str, metadata: Metadata) -> Optional[Language]:
    """Overwrite ``Content-Language`` with the normalized detection result.

    Metadata is left untouched when the detector has no confident guess.
    """

    detected = detector.detect(content)
    if detected is None:
        return None
    language = normalize_language(detected)
    metadata.set(CONTENT_LANGUAGE, language.value)
    return language


__all__ = [
    "DEFAULT_MIN_CONFIDENCE",
    "LanguageDetector",
    "apply_detected_language",
    "normalize_language",
]
