import io

from docextract.ingestion.detector import base_media_type, detect_media_type


def test_pdf_magic_wins_over_extension() -> None:
    stream = io.BytesIO(b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n")

    assert detect_media_type(stream, "notes.txt") == "application/pdf"


def test_png_signature() -> None:
    stream = io.BytesIO(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32)

    assert detect_media_type(stream, None) == "image/png"


def test_extension_used_for_zip_containers() -> None:
    stream = io.BytesIO(b"PK\x03\x04" + b"\x00" * 64)

    detected = detect_media_type(stream, "report.docx")

    assert detected == "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_text_sniff_without_name() -> None:
    assert detect_media_type(io.BytesIO("Grüße aus Köln".encode("utf-8"))) == "text/plain"


def test_binary_without_name_is_unknown() -> None:
    assert detect_media_type(io.BytesIO(b"\x00\x01\x02\x03garbage")) is None


def test_stream_position_is_restored() -> None:
    stream = io.BytesIO(b"hello world")
    stream.seek(6)

    detect_media_type(stream, "hello.txt")

    assert stream.tell() == 6


def test_base_media_type_strips_parameters() -> None:
    assert base_media_type("Text/HTML; charset=ISO-8859-1") == "text/html"
