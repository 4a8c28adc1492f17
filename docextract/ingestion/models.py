"""Common data models for document extraction."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

UNKNOWN_MIME_TYPE = "UNKNOWN"


class Language(str, Enum):
    """Languages known to the detector, keyed by ISO 639-1 code."""

    AFRIKAANS = "af"
    ARABIC = "ar"
    BULGARIAN = "bg"
    CATALAN = "ca"
    CHINESE = "zh"
    CROATIAN = "hr"
    CZECH = "cs"
    DANISH = "da"
    DUTCH = "nl"
    ENGLISH = "en"
    ESTONIAN = "et"
    FINNISH = "fi"
    FRENCH = "fr"
    GALICIAN = "gl"
    GERMAN = "de"
    GREEK = "el"
    HEBREW = "he"
    HINDI = "hi"
    HUNGARIAN = "hu"
    INDONESIAN = "id"
    ITALIAN = "it"
    JAPANESE = "ja"
    KOREAN = "ko"
    LATVIAN = "lv"
    LITHUANIAN = "lt"
    NORWEGIAN = "no"
    PERSIAN = "fa"
    POLISH = "pl"
    PORTUGUESE = "pt"
    ROMANIAN = "ro"
    RUSSIAN = "ru"
    SLOVAK = "sk"
    SLOVENIAN = "sl"
    SPANISH = "es"
    SWEDISH = "sv"
    TURKISH = "tr"
    UKRAINIAN = "uk"
    VIETNAMESE = "vi"
    NONE = "none"
    UNKNOWN = "unknown"

    @property
    def iso6392(self) -> Optional[str]:
        """Return the three-letter code Tesseract uses for this language."""

        return _ISO_639_2.get(self)

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Language"]:
        """Parse an ISO 639-1/639-2 code, an English name, or a locale tag."""

        if value is None:
            return None
        token = value.strip().lower()
        if not token:
            return None

        for candidate in (token, token.replace("_", "-").split("-")[0]):
            try:
                return cls(candidate)
            except ValueError:
                pass
            if candidate in _BY_ISO_639_2:
                return _BY_ISO_639_2[candidate]
            if candidate.upper() in cls.__members__:
                return cls[candidate.upper()]
        return None


_ISO_639_2: Dict[Language, str] = {
    Language.AFRIKAANS: "afr",
    Language.ARABIC: "ara",
    Language.BULGARIAN: "bul",
    Language.CATALAN: "cat",
    Language.CHINESE: "chi_sim",
    Language.CROATIAN: "hrv",
    Language.CZECH: "ces",
    Language.DANISH: "dan",
    Language.DUTCH: "nld",
    Language.ENGLISH: "eng",
    Language.ESTONIAN: "est",
    Language.FINNISH: "fin",
    Language.FRENCH: "fra",
    Language.GALICIAN: "glg",
    Language.GERMAN: "deu",
    Language.GREEK: "ell",
    Language.HEBREW: "heb",
    Language.HINDI: "hin",
    Language.HUNGARIAN: "hun",
    Language.INDONESIAN: "ind",
    Language.ITALIAN: "ita",
    Language.JAPANESE: "jpn",
    Language.KOREAN: "kor",
    Language.LATVIAN: "lav",
    Language.LITHUANIAN: "lit",
    Language.NORWEGIAN: "nor",
    Language.PERSIAN: "fas",
    Language.POLISH: "pol",
    Language.PORTUGUESE: "por",
    Language.ROMANIAN: "ron",
    Language.RUSSIAN: "rus",
    Language.SLOVAK: "slk",
    Language.SLOVENIAN: "slv",
    Language.SPANISH: "spa",
    Language.SWEDISH: "swe",
    Language.TURKISH: "tur",
    Language.UKRAINIAN: "ukr",
    Language.VIETNAMESE: "vie",
}

_BY_ISO_639_2: Dict[str, Language] = {code: lang for lang, code in _ISO_639_2.items()}
# Bibliographic variants.
_BY_ISO_639_2.update({"ger": Language.GERMAN, "fre": Language.FRENCH, "chi": Language.CHINESE})

CANONICAL_LANGUAGES = frozenset(
    {
        Language.ENGLISH,
        Language.SPANISH,
        Language.FRENCH,
        Language.GERMAN,
        Language.NONE,
        Language.UNKNOWN,
    }
)


class ExtractionMethod(str, Enum):
    """Engine configuration that produced a document."""

    STANDARD = "standard"
    OCR = "ocr"


@dataclass(frozen=True)
class Document:
    """Immutable record of a successfully extracted file."""

    path: Path
    content: str
    language: Language
    encoding: str
    mime_type: str
    metadata: Mapping[str, str]
    extraction_method: ExtractionMethod

    def __post_init__(self) -> None:
        if self.content is None:
            raise ValueError("Document content must not be None")
        if self.language not in CANONICAL_LANGUAGES:
            raise ValueError(f"Non-canonical document language: {self.language!r}")
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_payload(self) -> Dict[str, Any]:
        """Return a JSON-compatible dict using the record's wire field names."""

        return {
            "path": str(self.path),
            "content": self.content,
            "language": self.language.name,
            "encoding": self.encoding,
            "mimeType": self.mime_type,
            "metadata": dict(self.metadata),
            "extractionMethod": self.extraction_method.value,
        }


@dataclass(frozen=True)
class User:
    """Owner of a scan; ``path`` is resolved under the configured data directory."""

    id: str
    path: Optional[str] = None

    @property
    def home(self) -> str:
        return self.path or self.id


@dataclass(frozen=True)
class ScanQueueEntry:
    """A discovered file waiting for extraction."""

    path: Path
    user_id: str

    def to_json(self) -> str:
        return json.dumps({"path": str(self.path), "user": self.user_id}, ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ScanQueueEntry":
        payload = json.loads(raw)
        return cls(path=Path(payload["path"]), user_id=str(payload["user"]))
