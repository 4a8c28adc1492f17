from docextract.ingestion.metadata import (
    CONTENT_ENCODING,
    CONTENT_LANGUAGE,
    CONTENT_LENGTH,
    CONTENT_TYPE,
    RESOURCE_NAME,
    Metadata,
    canonicalize,
    get_encoding,
    get_language,
    get_length,
)
from docextract.ingestion.models import Language


def test_metadata_last_write_wins() -> None:
    metadata = Metadata()
    metadata.add("dc:creator", "alice")
    metadata.add("dc:creator", "bob")

    assert metadata.get("dc:creator") == "bob"
    assert metadata.get_values("dc:creator") == ["alice", "bob"]
    assert metadata.as_dict() == {"dc:creator": "bob"}


def test_set_replaces_all_values() -> None:
    metadata = Metadata()
    metadata.add("k", "1")
    metadata.add("k", "2")
    metadata.set("k", 3)

    assert metadata.get_values("k") == ["3"]
    assert len(metadata) == 1


def test_length_parses_integers_only() -> None:
    metadata = Metadata()
    assert get_length(metadata) is None

    metadata.set(CONTENT_LENGTH, "1024")
    assert get_length(metadata) == 1024

    metadata.set(CONTENT_LENGTH, "12abc")
    assert get_length(metadata) is None


def test_any_declared_encoding_reads_as_utf8() -> None:
    metadata = Metadata()
    assert get_encoding(metadata) is None

    metadata.set(CONTENT_ENCODING, "ISO-8859-1")
    assert get_encoding(metadata) == "UTF-8"


def test_language_is_parsed_but_not_normalized() -> None:
    metadata = Metadata()
    metadata.set(CONTENT_LANGUAGE, "it")

    assert get_language(metadata) is Language.ITALIAN


def test_canonicalize_splits_canonical_and_extra_fields() -> None:
    metadata = Metadata()
    metadata.set(RESOURCE_NAME, "report.pdf")
    metadata.set(CONTENT_TYPE, "application/pdf")
    metadata.set(CONTENT_LENGTH, "42")
    metadata.set("dc:title", "Quarterly report")

    canonical = canonicalize(metadata)

    assert canonical.resource_name == "report.pdf"
    assert canonical.content_type == "application/pdf"
    assert canonical.content_length == 42
    assert canonical.content_encoding is None
    assert canonical.content_language is None
    assert dict(canonical.extra) == {"dc:title": "Quarterly report"}
    assert canonical.all_fields["Content-Length"] == "42"


def test_canonical_snapshot_is_detached_from_container() -> None:
    metadata = Metadata()
    metadata.set("dc:title", "before")
    canonical = canonicalize(metadata)

    metadata.set("dc:title", "after")

    assert canonical.all_fields["dc:title"] == "before"
