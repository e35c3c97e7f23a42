"""Tests for roteirista.history — uses a temp database."""

import json
import sqlite3

import pytest

from roteirista.models import DEFAULT_REQUEST, GeneratedContent, ScriptContent


@pytest.fixture(autouse=True)
def _tmp_db(tmp_path, monkeypatch):
    """Point the database at a temp file for each test."""
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr("roteirista.config.settings.database_path", db_path)
    from roteirista.db import init_db
    init_db()


def _make_content(suffix="1") -> GeneratedContent:
    return GeneratedContent(
        script=ScriptContent(introduction=f"Intro {suffix}", development="Meio", conclusion="Fim"),
        titles=[f"Título {suffix}"],
        description="Descrição",
        tags=["fé", "coragem"],
        thumbnail_prompts=["Prompt"],
    )


def test_add_then_load_survives_restart():
    from roteirista.history import HistoryStore

    store = HistoryStore()
    record = store.add(DEFAULT_REQUEST, _make_content())

    reloaded = HistoryStore()
    records = reloaded.load()
    assert len(records) == 1
    assert records[0].id == record.id
    assert records[0].request == DEFAULT_REQUEST
    assert records[0].content == record.content
    assert records[0].timestamp == record.timestamp


def test_add_prepends_newest_first():
    from roteirista.history import HistoryStore

    store = HistoryStore()
    first = store.add(DEFAULT_REQUEST, _make_content("1"))
    second = store.add(DEFAULT_REQUEST, _make_content("2"))

    assert [r.id for r in store.records] == [second.id, first.id]
    assert first.id != second.id


def test_delete_keeps_other_order():
    from roteirista.history import HistoryStore

    store = HistoryStore()
    a = store.add(DEFAULT_REQUEST, _make_content("a"))
    b = store.add(DEFAULT_REQUEST, _make_content("b"))
    c = store.add(DEFAULT_REQUEST, _make_content("c"))

    store.delete(b.id)
    assert [r.id for r in store.records] == [c.id, a.id]
    assert [r.id for r in HistoryStore().load()] == [c.id, a.id]


def test_delete_absent_is_noop():
    from roteirista.history import HistoryStore

    store = HistoryStore()
    a = store.add(DEFAULT_REQUEST, _make_content())
    store.delete("missing")
    assert [r.id for r in store.records] == [a.id]


def test_clear_erases_blob():
    from roteirista.config import settings
    from roteirista.db import kv_get
    from roteirista.history import HistoryStore

    store = HistoryStore()
    store.add(DEFAULT_REQUEST, _make_content())
    store.clear()

    assert store.records == []
    assert kv_get(settings.history_key) is None
    assert HistoryStore().load() == []


def test_get():
    from roteirista.history import HistoryStore

    store = HistoryStore()
    record = store.add(DEFAULT_REQUEST, _make_content())
    assert store.get(record.id) is record
    assert store.get("nope") is None


def test_load_missing_blob_is_empty():
    from roteirista.history import HistoryStore

    assert HistoryStore().load() == []


@pytest.mark.parametrize(
    "blob",
    [
        "{not json",
        json.dumps([{"id": "x"}]),
        json.dumps("string"),
        json.dumps([{"id": "x", "timestamp": 1700000000, "formData": {}, "generatedContent": {}}]),
        json.dumps([{"id": "x", "timestamp": None, "formData": {}, "generatedContent": {}}]),
        json.dumps([{"id": "x", "timestamp": "2024-05-01T12:00:00Z", "formData": "oops", "generatedContent": {}}]),
        json.dumps([42]),
    ],
)
def test_load_corrupt_blob_is_empty(blob, caplog):
    from roteirista.config import settings
    from roteirista.db import kv_set
    from roteirista.history import HistoryStore

    kv_set(settings.history_key, blob)
    store = HistoryStore()
    assert store.load() == []
    assert store.records == []
    assert "corrupt" in caplog.text


def test_load_reads_stored_format():
    from roteirista.config import settings
    from roteirista.db import kv_set
    from roteirista.history import HistoryStore

    blob = [
        {
            "id": "abc",
            "timestamp": "2024-05-01T12:00:00.000Z",
            "formData": {
                "projectName": "Jonas",
                "story": "Jonas e o grande peixe",
                "tone": "Narrativo",
                "structure": "Personalizada",
                "includeVerses": False,
                "includeReflections": True,
                "titleIdeas": "",
                "descriptionIdeas": "",
                "thumbnailIdeas": "",
                "targetAudience": "Crianças",
            },
            "generatedContent": {
                "script": {"introduction": "I", "development": "D", "conclusion": "C"},
                "titles": ["T"],
                "description": "Desc",
                "tags": ["jonas"],
                "thumbnailPrompts": ["P"],
            },
        }
    ]
    kv_set(settings.history_key, json.dumps(blob))

    records = HistoryStore().load()
    assert len(records) == 1
    assert records[0].id == "abc"
    assert records[0].request.project_name == "Jonas"
    assert records[0].timestamp.year == 2024
    assert records[0].timestamp.tzinfo is not None


def test_evicts_oldest_past_capacity():
    from roteirista.history import HistoryStore

    store = HistoryStore(max_records=2)
    store.add(DEFAULT_REQUEST, _make_content("1"))
    b = store.add(DEFAULT_REQUEST, _make_content("2"))
    c = store.add(DEFAULT_REQUEST, _make_content("3"))

    assert [r.id for r in store.records] == [c.id, b.id]
    assert [r.id for r in HistoryStore(max_records=2).load()] == [c.id, b.id]


def test_storage_failure_keeps_memory(monkeypatch, caplog):
    from roteirista.history import HistoryStore

    def _fail(*args):
        raise sqlite3.OperationalError("database or disk is full")

    monkeypatch.setattr("roteirista.history.db.kv_set", _fail)
    store = HistoryStore()
    record = store.add(DEFAULT_REQUEST, _make_content())

    assert store.records == [record]
    assert "Failed to save history" in caplog.text
