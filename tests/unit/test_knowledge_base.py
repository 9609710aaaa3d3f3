"""Tests for the KnowledgeBase facade."""

import pytest

from conftest import FakePageSource, lines_to_fragments
from policy_assistant.config import AppConfig
from policy_assistant.exceptions import BatchIngestionError, FileExtractionError
from policy_assistant.ingestion.document_store import DocumentStore
from policy_assistant.ingestion.parsers.base import UploadedFile
from policy_assistant.ingestion.processor import DocumentProcessor
from policy_assistant.ingestion.storage import InMemoryStore
from policy_assistant.knowledge_base import KnowledgeBase, collect_files
from policy_assistant.retrieval.engine import RetrievalEngine

LEAVE_LINES = ["POLICY: Leave", "Employees get 15 vacation days per year."]
SECURITY_LINES = ["SECURITY RULES", "Badges must be worn inside the building at all times."]


def _upload(name):
    return UploadedFile.from_bytes(name, b"%PDF " + name.encode())


@pytest.fixture
def backend():
    return InMemoryStore()


@pytest.fixture
def make_kb(backend, fake_source_factory):
    def factory(on_file_error="continue"):
        processor = DocumentProcessor(
            page_source_factory=fake_source_factory, on_file_error=on_file_error
        )
        return KnowledgeBase(DocumentStore(backend), processor=processor).open()
    return factory


@pytest.fixture
def registered(fake_sources):
    fake_sources["leave.pdf"] = FakePageSource([lines_to_fragments(LEAVE_LINES)])
    fake_sources["security.pdf"] = FakePageSource([lines_to_fragments(SECURITY_LINES)])
    return fake_sources


class TestKnowledgeBase:

    def test_ingest_then_search(self, make_kb, registered):
        kb = make_kb()
        kb.ingest([_upload("leave.pdf"), _upload("security.pdf")])

        context = kb.search("how many vacation days")

        assert '1. FROM "leave.pdf" - POLICY: Leave:' in context
        assert "security.pdf" not in context

    def test_search_without_documents(self, make_kb):
        assert make_kb().search("vacation") == ""

    def test_documents_survive_restart(self, make_kb, registered):
        make_kb().ingest([_upload("leave.pdf")])
        reopened = make_kb()
        assert [d.name for d in reopened.documents] == ["leave.pdf"]
        assert reopened.search("vacation days") != ""

    def test_partial_batch_stores_successes(self, make_kb, registered):
        kb = make_kb()
        with pytest.raises(BatchIngestionError):
            kb.ingest([_upload("leave.pdf"), _upload("missing.pdf"), _upload("security.pdf")])
        assert [d.name for d in kb.documents] == ["leave.pdf", "security.pdf"]

    def test_aborted_batch_stores_nothing(self, make_kb, registered):
        kb = make_kb(on_file_error="abort")
        with pytest.raises(FileExtractionError):
            kb.ingest([_upload("leave.pdf"), _upload("missing.pdf")])
        assert kb.documents == []

    def test_delete_document(self, make_kb, registered):
        kb = make_kb()
        leave, security = kb.ingest([_upload("leave.pdf"), _upload("security.pdf")])

        assert kb.delete_document(leave.id) is True
        assert kb.delete_document(leave.id) is False
        assert [d.id for d in kb.documents] == [security.id]
        assert kb.search("vacation days") == ""

    def test_clear(self, make_kb, registered):
        kb = make_kb()
        kb.ingest([_upload("leave.pdf")])
        kb.clear()
        assert len(kb) == 0
        assert len(make_kb()) == 0

    def test_from_config_uses_file_store(self, tmp_path):
        config = AppConfig(storage={"directory": str(tmp_path / "store")})
        with KnowledgeBase.from_config(config) as kb:
            assert len(kb) == 0
            assert kb.supported_formats == [".pdf"]

    def test_injected_collaborators_are_kept(self, backend):
        processor = DocumentProcessor()
        engine = RetrievalEngine()
        kb = KnowledgeBase(DocumentStore(backend), processor=processor, engine=engine)
        assert kb.processor is processor
        assert kb.engine is engine


class TestCollectFiles:

    def test_expands_directories_sorted(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "b.pdf").write_bytes(b"b")
        (tmp_path / "sub" / "a.PDF").write_bytes(b"a")
        (tmp_path / "notes.txt").write_text("skip")

        files = collect_files([tmp_path])

        assert [f.name for f in files] == ["b.pdf", "a.PDF"]
        assert files[0].read() == b"b"
        assert files[0].size == 1

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_files([tmp_path / "absent.pdf"])
