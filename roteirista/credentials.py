"""API key handling with an optional "remember me" preference."""

from __future__ import annotations

import logging
import sqlite3

from roteirista import db
from roteirista.config import settings

logger = logging.getLogger(__name__)


class CredentialStore:
    """Holds the provider API key.

    When ``persist`` is on, the key is mirrored to storage on every change.
    Turning it on snapshots the current key; turning it off erases the
    stored copy.
    """

    def __init__(self):
        self.api_key = ""
        self.persist = False

    def load(self) -> None:
        try:
            self.persist = db.kv_get(settings.persist_pref_key) == "true"
            if self.persist:
                self.api_key = db.kv_get(settings.api_key_key) or ""
        except sqlite3.Error as exc:
            logger.warning("Failed to load API key preference: %s", exc)

    @property
    def present(self) -> bool:
        return bool(self.api_key.strip())

    def set_api_key(self, key: str) -> None:
        self.api_key = key
        if self.persist:
            try:
                db.kv_set(settings.api_key_key, key)
            except sqlite3.Error as exc:
                logger.warning("Failed to save API key: %s", exc)

    def set_persist(self, persist: bool) -> None:
        self.persist = persist
        try:
            db.kv_set(settings.persist_pref_key, "true" if persist else "false")
            if persist:
                db.kv_set(settings.api_key_key, self.api_key)
            else:
                db.kv_remove(settings.api_key_key)
        except sqlite3.Error as exc:
            logger.warning("Failed to update API key preference: %s", exc)

    def clear_api_key(self) -> None:
        self.api_key = ""
        try:
            db.kv_remove(settings.api_key_key)
        except sqlite3.Error as exc:
            logger.warning("Failed to clear API key: %s", exc)

    def masked(self) -> str:
        if not self.api_key:
            return ""
        if len(self.api_key) <= 8:
            return "*" * len(self.api_key)
        return f"{self.api_key[:4]}{'*' * (len(self.api_key) - 8)}{self.api_key[-4:]}"
