"""Persistence of past calculations and of the last submitted form."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from compound_calc.domain.errors import HistoryWriteError, StorageError
from compound_calc.domain.storage import KeyValueStorage
from compound_calc.models import (
    DEFAULT_PARAMS,
    CalculationHistoryRecord,
    CalculationParams,
    CalculationResult,
)

logger = logging.getLogger(__name__)

HISTORY_KEY = "calculationHistory"
FORM_STATE_KEY = "calculatorParams"


def utc_timestamp() -> str:
    """ISO timestamp in UTC with millisecond precision, e.g. 2024-03-01T08:15:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record_id() -> str:
    return uuid.uuid4().hex


class HistoryStore:
    """
    Most-recent-first list of calculation records kept under a single key.

    Reads never fail: a missing, unparsable or non-list payload reads as an
    empty history. Writes that the backend rejects raise HistoryWriteError.
    Entries are kept as stored, so fields added by newer versions survive a
    save or delete made by this one.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = HISTORY_KEY,
        clock: Callable[[], str] = utc_timestamp,
        id_factory: Callable[[], str] = new_record_id,
    ):
        self.storage = storage
        self.key = key
        self._clock = clock
        self._id_factory = id_factory

    def _read_entries(self) -> List[Dict[str, Any]]:
        try:
            raw = self.storage.get_item(self.key)
        except (StorageError, OSError):
            logger.warning("Could not read %r from storage; using empty history", self.key, exc_info=True)
            return []
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored history under %r is not valid JSON; using empty history", self.key)
            return []

        if not isinstance(data, list):
            logger.warning("Stored history under %r is not a list; using empty history", self.key)
            return []
        return [entry for entry in data if isinstance(entry, dict)]

    def _write_entries(self, entries: List[Dict[str, Any]]) -> None:
        try:
            self.storage.set_item(self.key, json.dumps(entries, ensure_ascii=False))
        except (StorageError, OSError) as exc:
            logger.exception("Failed to persist calculation history")
            raise HistoryWriteError(f"calculation history could not be saved: {exc}") from exc

    def _unique_id(self, entries: List[Dict[str, Any]]) -> str:
        taken = {entry.get("id") for entry in entries}
        record_id = self._id_factory()
        while record_id in taken:
            record_id = self._id_factory()
        return record_id

    def save(self, params: CalculationParams, result: CalculationResult) -> CalculationHistoryRecord:
        entries = self._read_entries()
        record = CalculationHistoryRecord(
            **params.model_dump(),
            **result.model_dump(),
            id=self._unique_id(entries),
            createdAt=self._clock(),
        )
        entries.insert(0, record.model_dump(mode="json", exclude_none=True))
        self._write_entries(entries)
        logger.info("Saved calculation %s (%d records)", record.id, len(entries))
        return record

    def list(self) -> List[CalculationHistoryRecord]:
        records: List[CalculationHistoryRecord] = []
        for entry in self._read_entries():
            try:
                records.append(CalculationHistoryRecord.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed history entry %r", entry.get("id"))
        return records

    def get(self, record_id: str) -> Optional[CalculationHistoryRecord]:
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def delete_by_id(self, record_id: str) -> None:
        entries = self._read_entries()
        remaining = [entry for entry in entries if entry.get("id") != record_id]
        if len(remaining) == len(entries):
            logger.debug("No history record %s to delete", record_id)
            return
        self._write_entries(remaining)
        logger.info("Deleted calculation %s", record_id)

    def clear(self) -> None:
        self._write_entries([])
        logger.info("Cleared calculation history")


class FormStateStore:
    """Remembers the parameters of the last submitted calculation."""

    def __init__(self, storage: KeyValueStorage, key: str = FORM_STATE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> CalculationParams:
        try:
            raw = self.storage.get_item(self.key)
        except (StorageError, OSError):
            logger.warning("Could not read %r from storage; using defaults", self.key, exc_info=True)
            return DEFAULT_PARAMS
        if raw is None:
            return DEFAULT_PARAMS
        try:
            return CalculationParams.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored form state under %r is invalid; using defaults", self.key)
            return DEFAULT_PARAMS

    def save(self, params: CalculationParams) -> None:
        try:
            self.storage.set_item(self.key, params.model_dump_json(exclude_none=True))
        except (StorageError, OSError) as exc:
            raise HistoryWriteError(f"form state could not be saved: {exc}") from exc
