from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from app.core.config import settings
from app.schemas import Record, RecordCandidate

logger = logging.getLogger(__name__)

# Serializes read-modify-write cycles so concurrent saves never share an id
_write_lock = threading.Lock()


class StoreError(RuntimeError):
    """Data file could not be read, parsed or written."""


class RecordStore:
    """Append-only record collection kept as a pretty-printed JSON array."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or settings.data_path)

    def _load(self) -> List[Record]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Malformed JSON in {self.path}: {e}") from e
        if not isinstance(data, list):
            logger.warning("Ignoring %s: top-level JSON value is %s, not a list", self.path, type(data).__name__)
            return []
        try:
            return [Record.model_validate(item) for item in data]
        except ValidationError as e:
            raise StoreError(f"Malformed record in {self.path}: {e}") from e

    def _dump(self, records: List[Record]) -> None:
        payload = json.dumps([r.model_dump() for r in records], indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e

    def read_all_sync(self) -> List[Record]:
        return self._load()

    def append_entry_sync(self, candidate: RecordCandidate) -> Record:
        with _write_lock:
            records = self._load()
            next_id = (records[-1].id if records else 0) + 1
            record = Record(id=next_id, **candidate.model_dump())
            self._dump([*records, record])
        logger.info("Stored record id=%d path=%s tags=%d", record.id, record.path, len(record.tags))
        return record

    async def read_all(self) -> List[Record]:
        """All records in insertion order; empty when nothing was stored yet."""
        return await asyncio.to_thread(self.read_all_sync)

    async def append_entry(self, candidate: RecordCandidate) -> Record:
        """Assign the next id (last id + 1, or 1) and persist the new record."""
        return await asyncio.to_thread(self.append_entry_sync, candidate)


_store_singleton: RecordStore | None = None


def get_store() -> RecordStore:
    global _store_singleton
    if _store_singleton is None or _store_singleton.path != Path(settings.data_path):
        _store_singleton = RecordStore()
    return _store_singleton
