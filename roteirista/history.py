"""Generation history, newest first, persisted as a single JSON blob."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from roteirista import db
from roteirista.config import settings
from roteirista.models import (
    GeneratedContent,
    GenerationRequest,
    HistoryRecord,
    content_from_dict,
    content_to_dict,
    request_from_dict,
    request_to_dict,
)

logger = logging.getLogger(__name__)


class HistoryStore:
    """In-memory list of history records mirrored to the key-value store.

    Every mutation rewrites the whole list in one ``kv_set`` call, so the
    stored blob always matches some complete in-memory state. Storage
    errors are logged and otherwise ignored; the in-memory list stays
    authoritative for the running process.
    """

    def __init__(self, kv_key: str | None = None, max_records: int | None = None):
        self.kv_key = kv_key or settings.history_key
        self.max_records = max_records if max_records is not None else settings.history_max_records
        self._records: list[HistoryRecord] = []

    @property
    def records(self) -> list[HistoryRecord]:
        return list(self._records)

    def get(self, record_id: str) -> HistoryRecord | None:
        return next((r for r in self._records if r.id == record_id), None)

    def load(self) -> list[HistoryRecord]:
        """Read the stored blob. Missing or corrupt data yields an empty history."""
        self._records = []
        try:
            raw = db.kv_get(self.kv_key)
        except sqlite3.Error as exc:
            logger.warning("Failed to read history from storage: %s", exc)
            return []
        if not raw:
            return []

        try:
            data = json.loads(raw)
            self._records = [_dict_to_record(d) for d in data]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Stored history is corrupt, starting empty: %s", exc)
            self._records = []

        logger.info("Loaded %d history records", len(self._records))
        return self.records

    def add(self, request: GenerationRequest, content: GeneratedContent) -> HistoryRecord:
        record = HistoryRecord(
            id=uuid.uuid4().hex,
            request=request,
            content=content,
            timestamp=datetime.now(timezone.utc),
        )
        records = [record, *self._records]
        if self.max_records and len(records) > self.max_records:
            evicted = len(records) - self.max_records
            logger.warning("History full, evicting %d oldest record(s)", evicted)
            records = records[: self.max_records]
        self._records = records
        self._save()
        return record

    def delete(self, record_id: str) -> None:
        self._records = [r for r in self._records if r.id != record_id]
        self._save()

    def clear(self) -> None:
        self._records = []
        try:
            db.kv_remove(self.kv_key)
        except sqlite3.Error as exc:
            logger.warning("Failed to clear history from storage: %s", exc)

    def _save(self) -> None:
        blob = json.dumps([_record_to_dict(r) for r in self._records], ensure_ascii=False)
        try:
            db.kv_set(self.kv_key, blob)
        except sqlite3.Error as exc:
            logger.warning("Failed to save history to storage: %s", exc)


def _record_to_dict(record: HistoryRecord) -> dict:
    return {
        "id": record.id,
        "timestamp": record.timestamp.isoformat(),
        "formData": request_to_dict(record.request),
        "generatedContent": content_to_dict(record.content),
    }


def _dict_to_record(d: dict) -> HistoryRecord:
    if not isinstance(d, dict) or not isinstance(d.get("timestamp"), str):
        raise ValueError("history record is not an object with a string timestamp")
    timestamp = datetime.fromisoformat(d["timestamp"].replace("Z", "+00:00"))
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return HistoryRecord(
        id=d["id"],
        timestamp=timestamp,
        request=request_from_dict(d["formData"]),
        content=content_from_dict(d["generatedContent"]),
    )
