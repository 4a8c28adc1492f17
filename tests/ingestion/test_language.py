import pytest
from docextract.ingestion.language import LanguageDetector, apply_detected_language, normalize_language
from docextract.ingestion.metadata import CONTENT_LANGUAGE, Metadata
from docextract.ingestion.models import Language

FRENCH_TEXT = (
    "Le gouvernement a présenté mercredi un nouveau projet de loi sur le logement. "
    "Selon le ministre, les loyers dans les grandes villes ont fortement augmenté "
    "depuis plusieurs années et les familles ont de plus en plus de difficultés à "
    "trouver un appartement à un prix raisonnable. Les associations de locataires "
    "saluent une avancée mais demandent des mesures plus ambitieuses."
)


class StubDetector:
    def __init__(self, code):
        self.code = code

    def detect(self, text):
        return self.code


@pytest.mark.parametrize("language", list(Language))
def test_normalize_language_is_total(language: Language) -> None:
    assert normalize_language(language) in {
        Language.ENGLISH,
        Language.SPANISH,
        Language.FRENCH,
        Language.GERMAN,
    }


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("en", Language.ENGLISH),
        ("es", Language.SPANISH),
        ("fr", Language.FRENCH),
        ("de", Language.GERMAN),
        ("gl", Language.SPANISH),
        ("ca", Language.SPANISH),
        ("it", Language.ENGLISH),
        ("zz", Language.ENGLISH),
        (None, Language.ENGLISH),
        (Language.UNKNOWN, Language.ENGLISH),
    ],
)
def test_normalize_language_mapping(value, expected: Language) -> None:
    assert normalize_language(value) is expected


def test_detector_identifies_french_paragraph() -> None:
    detector = LanguageDetector()

    assert normalize_language(detector.detect(FRENCH_TEXT)) is Language.FRENCH


def test_detector_returns_none_without_text() -> None:
    detector = LanguageDetector()

    assert detector.detect("") is None
    assert detector.detect("   \n ") is None


def test_detector_respects_confidence_threshold() -> None:
    detector = LanguageDetector(min_confidence=1.01)

    assert detector.detect(FRENCH_TEXT) is None


def test_apply_detected_language_overwrites_metadata() -> None:
    metadata = Metadata()
    metadata.set(CONTENT_LANGUAGE, "de")

    language = apply_detected_language(StubDetector("gl"), "Ola mundo", metadata)

    assert language is Language.SPANISH
    assert metadata.get(CONTENT_LANGUAGE) == "es"


def test_apply_detected_language_keeps_metadata_without_guess() -> None:
    metadata = Metadata()
    metadata.set(CONTENT_LANGUAGE, "de")

    assert apply_detected_language(StubDetector(None), "???", metadata) is None
    assert metadata.get(CONTENT_LANGUAGE) == "de"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("deu", Language.GERMAN),
        ("ger", Language.GERMAN),
        ("German", Language.GERMAN),
        ("fr-CA", Language.FRENCH),
        ("zh_CN", Language.CHINESE),
        ("klingon", None),
        ("", None),
    ],
)
def test_language_parse(value: str, expected) -> None:
    assert Language.parse(value) is expected


def test_iso6392_codes() -> None:
    assert Language.GERMAN.iso6392 == "deu"
    assert Language.UNKNOWN.iso6392 is None
