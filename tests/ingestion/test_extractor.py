import io
import locale
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

import pytest
import pytesseract
from PIL import Image, ImageDraw
from docextract.config import ExtractionConfig
from docextract.ingestion.errors import (
    DecodeError,
    ExcludedMediaTypeError,
    StreamOpenError,
    UnsupportedMediaTypeError,
)
from docextract.ingestion.extractor import DocumentExtractor
from docextract.ingestion.models import ExtractionMethod, Language
from docextract.ingestion.registry import ParserDescriptor, build_default_registry


class StubDetector:
    def __init__(self, code: Optional[str] = None) -> None:
        self.code = code

    def detect(self, text: str) -> Optional[str]:
        return self.code


class ExplodingDecoder:
    name = "text"
    media_types = frozenset({"text/plain"})

    def decode(self, stream, sink, metadata, context) -> None:
        raise RuntimeError("decoder blew up")


def _extractor(config: ExtractionConfig, detector: Optional[StubDetector] = None, registry=None) -> DocumentExtractor:
    return DocumentExtractor(
        config,
        registry=registry or build_default_registry(include_docling=False),
        language_detector=detector or StubDetector(),
    )


def _image() -> Image.Image:
    image = Image.new("RGB", (320, 120), "white")
    ImageDraw.Draw(image).text((20, 40), "Hallo Welt", fill="black")
    return image


def _image_only_pdf(path: Path) -> Path:
    _image().save(path, format="PDF")
    return path


def _png(path: Path) -> Path:
    _image().save(path, format="PNG")
    return path


def test_plain_text_document(tmp_path: Path) -> None:
    source = tmp_path / "hello.txt"
    source.write_text("Hello world, this is a plain text file.", encoding="utf-8")

    document = _extractor(ExtractionConfig(), StubDetector("en")).parse(source)

    assert document is not None
    assert document.content == "Hello world, this is a plain text file."
    assert document.mime_type == "text/plain"
    assert document.encoding == "UTF-8"
    assert document.language is Language.ENGLISH
    assert document.extraction_method is ExtractionMethod.STANDARD
    assert document.path == source.absolute()
    assert document.metadata["resourceName"] == "hello.txt"
    assert document.metadata["Content-Length"] == str(source.stat().st_size)


def test_detected_language_is_normalized(tmp_path: Path) -> None:
    source = tmp_path / "ola.txt"
    source.write_text("Ola mundo", encoding="utf-8")

    document = _extractor(ExtractionConfig(), StubDetector("gl")).parse(source)

    assert document.language is Language.SPANISH
    assert document.metadata["Content-Language"] == "es"


def test_configured_language_used_without_detection(tmp_path: Path) -> None:
    source = tmp_path / "short.txt"
    source.write_text("?", encoding="utf-8")

    unknown = _extractor(ExtractionConfig()).parse(source)
    italian = _extractor(ExtractionConfig(language=Language.ITALIAN)).parse(source)

    assert unknown.language is Language.UNKNOWN
    assert italian.language is Language.ENGLISH


def test_excluded_image_fails_explicitly(tmp_path: Path) -> None:
    source = _png(tmp_path / "scan.png")
    extractor = _extractor(ExtractionConfig(ocr_enabled=False))

    with pytest.raises(ExcludedMediaTypeError):
        extractor.extract_file(source)
    assert extractor.parse(source) is None


def test_unknown_binary_is_unsupported(tmp_path: Path) -> None:
    source = tmp_path / "blob.bin"
    source.write_bytes(b"\x00\x01\x02\x03\xfe\xff" * 10)

    with pytest.raises(UnsupportedMediaTypeError):
        _extractor(ExtractionConfig()).extract_file(source)


def test_missing_file_is_stream_error(tmp_path: Path) -> None:
    extractor = _extractor(ExtractionConfig())

    with pytest.raises(StreamOpenError):
        extractor.extract_file(tmp_path / "missing.txt")
    assert extractor.parse(tmp_path / "missing.txt") is None


def test_decoder_failure_is_wrapped(tmp_path: Path) -> None:
    source = tmp_path / "boom.txt"
    source.write_text("boom", encoding="utf-8")
    registry = build_default_registry(include_docling=False).register(ParserDescriptor.of(ExplodingDecoder()))

    with pytest.raises(DecodeError) as excinfo:
        _extractor(ExtractionConfig(), registry=registry).extract_file(source)

    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_image_only_pdf_with_ocr(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Optional[str]] = []

    def fake_image_to_string(image, lang=None, **kwargs):
        calls.append(lang)
        return "Hallo Welt"

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)
    source = _image_only_pdf(tmp_path / "scan.pdf")

    result = _extractor(ExtractionConfig(ocr_enabled=True, language=Language.GERMAN)).extract_file(source)

    assert "Hallo Welt" in result.document.content
    assert calls == ["deu"]
    assert result.document.mime_type == "application/pdf"
    assert result.document.language is Language.GERMAN
    assert result.document.extraction_method is ExtractionMethod.OCR
    assert result.document.encoding == locale.getpreferredencoding(False)


def test_image_only_pdf_without_ocr(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("OCR must not run")

    monkeypatch.setattr(pytesseract, "image_to_string", fail)
    source = _image_only_pdf(tmp_path / "scan.pdf")

    document = _extractor(ExtractionConfig(ocr_enabled=False)).parse(source)

    assert document is not None
    assert document.content.strip() == ""
    assert document.metadata["xmpTPg:NPages"] == "1"


def test_extract_from_stream_without_length() -> None:
    result = _extractor(ExtractionConfig()).extract(io.BytesIO(b"inline text"), "inline.txt")

    assert result.document.content == "inline text"
    assert "Content-Length" not in result.document.metadata


def test_shared_extractor_keeps_documents_separate(tmp_path: Path) -> None:
    sources = []
    for index in range(8):
        source = tmp_path / f"file-{index}.txt"
        source.write_text(f"document number {index}", encoding="utf-8")
        sources.append(source)
    extractor = _extractor(ExtractionConfig())

    with ThreadPoolExecutor(max_workers=4) as pool:
        documents = list(pool.map(extractor.parse, sources))

    for index, document in enumerate(documents):
        assert document.content == f"document number {index}"
        assert document.metadata["resourceName"] == f"file-{index}.txt"


@pytest.mark.parametrize(
    ("name", "body"),
    [
        ("script.py", "print('hello')\n"),
        ("data.json", '{"title": "report"}\n'),
        ("notes.xml", "<notes><note>remember</note></notes>\n"),
        ("conf.yaml", "key: value\n"),
        ("README", "Read me first.\n"),
    ],
)
def test_text_formats_are_decoded_as_text(tmp_path: Path, name: str, body: str) -> None:
    source = tmp_path / name
    source.write_text(body, encoding="utf-8")

    document = _extractor(ExtractionConfig()).extract_file(source).document

    assert document.content == body
    assert document.encoding == "UTF-8"


def _pdf_with_link(path: Path, text: str, url: str) -> Path:
    content = b"BT /F1 14 Tf 20 100 Td (%s) Tj ET" % text.encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 200] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R /Annots [6 0 R] >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n%s\nendstream" % (len(content), content),
        b"<< /Type /Annot /Subtype /Link /Rect [20 90 220 120] /Border [0 0 0] "
        b"/A << /S /URI /URI (%s) >> >>" % url.encode("ascii"),
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n%s\nendobj\n" % (number, body)
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref)
    path.write_bytes(bytes(out))
    return path


def test_pdf_text_and_links_come_from_one_pass(tmp_path: Path) -> None:
    source = _pdf_with_link(tmp_path / "linked.pdf", "Quarterly report", "https://example.org/report")

    result = _extractor(ExtractionConfig()).extract_file(source)

    assert "Quarterly report" in result.document.content
    assert [link.href for link in result.links] == ["https://example.org/report"]
    assert "https://example.org/report" not in result.document.content


def test_docling_html_text_and_links(tmp_path: Path) -> None:
    pytest.importorskip("docling")
    source = tmp_path / "page.html"
    source.write_text(
        "<html><body><h1>Release notes</h1>"
        '<p>Read <a href="https://example.org/docs">the documentation</a> first.</p>'
        "</body></html>",
        encoding="utf-8",
    )
    registry = build_default_registry(include_docling=True)

    result = _extractor(ExtractionConfig(), registry=registry).extract_file(source)

    assert "Release notes" in result.document.content
    assert "the documentation" in result.document.content
    assert result.document.mime_type == "text/html"
    assert result.document.metadata["docling:format"] == "html"
    assert any(link.href.rstrip("/") == "https://example.org/docs" for link in result.links)


def _repeated_image_pdf(path: Path) -> Path:
    image = _image()
    image.save(path, format="PDF", save_all=True, append_images=[image.copy()])
    return path


@pytest.mark.parametrize(("unique_only", "expected_calls"), [(False, 2), (True, 1)])
def test_repeated_inline_images(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, unique_only: bool, expected_calls: int
) -> None:
    calls: List[Optional[str]] = []

    def fake_image_to_string(image, lang=None, **kwargs):
        calls.append(lang)
        return "Seite"

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)
    source = _repeated_image_pdf(tmp_path / "two-pages.pdf")
    config = ExtractionConfig(
        ocr_enabled=True,
        language=Language.GERMAN,
        extract_unique_inline_images_only=unique_only,
    )

    document = _extractor(config).parse(source)

    assert len(calls) == expected_calls
    assert document.content.count("Seite") == expected_calls
    assert document.metadata["xmpTPg:NPages"] == "2"


def test_bonjour_le_monde_is_french(tmp_path: Path) -> None:
    source = tmp_path / "bonjour.txt"
    source.write_text("Bonjour le monde", encoding="utf-8")
    extractor = DocumentExtractor(ExtractionConfig(), registry=build_default_registry(include_docling=False))

    document = extractor.parse(source)

    assert document.language is Language.FRENCH
    assert document.metadata["Content-Language"] == "fr"
