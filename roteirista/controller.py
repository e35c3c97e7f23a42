"""Application controller: form editing, generation and history handling."""

from __future__ import annotations

import dataclasses
import logging
from enum import Enum

from roteirista.credentials import CredentialStore
from roteirista.errors import BlockBusy, MissingCredential, RoteiristaError
from roteirista.history import HistoryStore
from roteirista.models import (
    DEFAULT_REQUEST,
    BlockKind,
    GeneratedContent,
    GenerationRequest,
    HistoryRecord,
    with_block,
)
from roteirista.scriptgen import generator

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    EDITING = "editing"
    CONFIRMING = "confirming"
    GENERATING = "generating"
    SHOWING = "showing"


class InvalidTransition(Exception):
    pass


class AppController:
    """Drives the four UI modes.

    ``error`` is independent of the mode: any failure sets it and the next
    successful action clears it. ``reloading`` tracks per-block
    regenerations that are in flight.
    """

    def __init__(self, history: HistoryStore | None = None, credentials: CredentialStore | None = None):
        self.history = history or HistoryStore()
        self.credentials = credentials or CredentialStore()
        self.mode = Mode.EDITING
        self.request: GenerationRequest = DEFAULT_REQUEST
        self.content: GeneratedContent | None = None
        self.active_id: str | None = None
        self.error: str | None = None
        self.reloading: dict[BlockKind, bool] = {}
        self._regen_tokens: dict[BlockKind, object] = {}

    def start(self) -> None:
        """Load persisted history and credentials."""
        self.history.load()
        self.credentials.load()

    # -- form -----------------------------------------------------------------

    def update_request(self, **fields) -> GenerationRequest:
        if self.mode == Mode.GENERATING:
            raise InvalidTransition("cannot edit the form while generating")
        self.request = dataclasses.replace(self.request, **fields)
        return self.request

    def request_generation(self) -> None:
        if self.mode != Mode.EDITING:
            raise InvalidTransition(f"cannot request generation from {self.mode.value}")
        self.mode = Mode.CONFIRMING

    def cancel_confirmation(self) -> None:
        if self.mode != Mode.CONFIRMING:
            raise InvalidTransition(f"nothing to cancel in {self.mode.value}")
        self.mode = Mode.EDITING

    # -- generation -------------------------------------------------------------

    async def confirm(self) -> HistoryRecord | None:
        """Run full generation. Returns the new history record, or None on failure."""
        if self.mode != Mode.CONFIRMING:
            raise InvalidTransition(f"cannot confirm from {self.mode.value}")

        self.error = None
        if not self.credentials.present:
            self.error = MissingCredential().user_message
            self.mode = Mode.EDITING
            return None

        self.mode = Mode.GENERATING
        request = self.request
        try:
            content = await generator.generate_content(request, self.credentials.api_key)
        except RoteiristaError as exc:
            self.error = exc.user_message
            self.mode = Mode.EDITING
            return None
        except Exception:
            self.mode = Mode.EDITING
            raise

        record = self.history.add(request, content)
        self.content = content
        self.active_id = record.id
        self._reset_reloading()
        self.mode = Mode.SHOWING
        logger.info("Generation stored as history record %s", record.id)
        return record

    async def regenerate(self, block: BlockKind | str, instruction: str = "") -> bool:
        """Regenerate a single block of the displayed content.

        Only the requested block is replaced, and only on success. A block
        already being regenerated rejects further requests until it settles.
        """
        block = BlockKind(block)
        if self.mode != Mode.SHOWING or self.content is None:
            raise InvalidTransition("nothing to adjust")

        if not self.credentials.present:
            self.error = MissingCredential().user_message
            return False
        if self.reloading.get(block):
            self.error = BlockBusy(block.value).user_message
            return False

        self.error = None
        token = object()
        self._regen_tokens[block] = token
        self.reloading[block] = True
        try:
            value = await generator.regenerate_block(
                block, self.request, self.content, instruction, self.credentials.api_key
            )
        except RoteiristaError as exc:
            self.error = exc.user_message
            return False
        finally:
            # A reset or a newer call may own the flag by now.
            current = self._regen_tokens.get(block) is token
            if current:
                del self._regen_tokens[block]
                self.reloading[block] = False

        if self.content is None or not current:
            logger.info("Discarding %s result, displayed content changed", block.value)
            return False
        # Re-read self.content: other blocks may have been replaced meanwhile.
        self.content = with_block(self.content, block, value)
        return True

    # -- history ----------------------------------------------------------------

    def load_record(self, record_id: str) -> bool:
        record = self.history.get(record_id)
        if record is None:
            self.error = "Roteiro não encontrado no histórico."
            return False
        self.error = None
        self.request = record.request
        self.content = record.content
        self.active_id = record.id
        self._reset_reloading()
        self.mode = Mode.SHOWING
        return True

    def delete_record(self, record_id: str) -> None:
        if record_id == self.active_id:
            self.new_script()
        self.history.delete(record_id)

    def clear_history(self) -> None:
        self.history.clear()
        self.new_script()

    def new_script(self) -> None:
        self.request = DEFAULT_REQUEST
        self.content = None
        self.active_id = None
        self._reset_reloading()
        self.mode = Mode.EDITING

    def _reset_reloading(self) -> None:
        self.reloading = {}
        self._regen_tokens = {}

    # -- credentials --------------------------------------------------------------

    def set_api_key(self, key: str) -> None:
        self.credentials.set_api_key(key)

    def set_persist_api_key(self, persist: bool) -> None:
        self.credentials.set_persist(persist)

    def clear_api_key(self) -> None:
        self.credentials.clear_api_key()
