from pathlib import Path

import fakeredis
import pytest
from docextract.activities import (
    dequeue_documents_activity,
    extract_document_activity,
    scan_directory_activity,
)
from docextract.scanning import RedisDocumentQueue


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> fakeredis.FakeRedis:
    fake = fakeredis.FakeRedis()

    def from_config(cls, user, config):
        return cls(user, fake, name=config.queue_name, capacity=config.capacity)

    monkeypatch.setattr(RedisDocumentQueue, "from_config", classmethod(from_config))
    return fake


@pytest.mark.asyncio
async def test_scan_then_dequeue_until_closed(tmp_path: Path, client: fakeredis.FakeRedis) -> None:
    (tmp_path / "alice").mkdir()
    for name in ("a.txt", "b.txt", "c.txt"):
        (tmp_path / "alice" / name).write_text(name)
    options = {"dataDir": str(tmp_path)}

    summary = await scan_directory_activity("alice", None, options)
    first = await dequeue_documents_activity("alice", 2, options)
    second = await dequeue_documents_activity("alice", 2, options)

    assert summary["count"] == 3
    assert [Path(p).name for p in first["paths"]] == ["a.txt", "b.txt"]
    assert not first["closed"]
    assert [Path(p).name for p in second["paths"]] == ["c.txt"]
    assert second["closed"]


@pytest.mark.asyncio
async def test_extract_document_activity_reports_success(tmp_path: Path) -> None:
    source = tmp_path / "note.txt"
    source.write_text("A short note about the quarterly budget review meeting.", encoding="utf-8")

    result = await extract_document_activity(str(source), {"language": "en"})

    assert result["status"] == "ok"
    assert result["document"]["mimeType"] == "text/plain"
    assert result["document"]["extractionMethod"] == "standard"
    assert result["links"] == []


@pytest.mark.asyncio
async def test_extract_document_activity_reports_failure(tmp_path: Path) -> None:
    result = await extract_document_activity(str(tmp_path / "missing.txt"), {})

    assert result["status"] == "failed"
    assert result["error_type"] == "StreamOpenError"
