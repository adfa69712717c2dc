"""Record stores.

Two interchangeable backends sit behind the same small interface:

* ``JsonRecordStore`` keeps every record in a single JSON array that is
  rewritten wholesale on each mutation (the db.json layout of the first server).
* ``SqlRecordStore`` keeps one row per record in the ``repairs`` table.

Both validate what they read (``RepairRecord.from_dict`` / the ORM schema)
and report unreadable or corrupt storage as ``PersistenceError``. A store that
does not exist yet is simply empty.
"""

import json
import logging
import os
import threading
import time
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..domain import RepairRecord
from ..errors import PersistenceError
from ..extensions import db as _db
from ..models import Repair

logger = logging.getLogger(__name__)


class RecordStore:
    """Interface shared by the record store backends."""

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def load_all(self) -> List[RepairRecord]:
        raise NotImplementedError

    def get(self, record_id: int) -> Optional[RepairRecord]:
        raise NotImplementedError

    def add(self, description: str, location: str, photo_before_ref: str, photo_after_ref: str) -> RepairRecord:
        raise NotImplementedError

    def remove(self, record_id: int) -> int:
        """Delete by id and return how many entries went away (0 or 1)."""
        raise NotImplementedError


class JsonRecordStore(RecordStore):
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._closed = True
        # highest id handed out by this process; ids are never reused
        self._last_id = 0

    def open(self) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        self._closed = False
        logger.info("JSON record store at %s", self.path)

    def close(self) -> None:
        self._closed = True

    # ---------- file access (caller holds _lock) ----------
    def _check_open(self) -> None:
        if self._closed:
            raise PersistenceError("record store is closed")

    def _read(self) -> List[RepairRecord]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"could not read record store: {e}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"record store is corrupt: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError("record store is corrupt: top level must be a JSON array")

        try:
            return [RepairRecord.from_dict(doc) for doc in data]
        except ValueError as e:
            raise PersistenceError(f"record store is corrupt: {e}") from e

    def _write(self, records: List[RepairRecord]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([r.to_document() for r in records], f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            # no half-written temp file stays next to the store
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("could not remove %s", tmp_path, exc_info=True)
            raise PersistenceError(f"could not write record store: {e}") from e

    def _next_id(self, records: List[RepairRecord]) -> int:
        # millisecond timestamp as in db.json, bumped past anything issued before
        candidate = int(time.time() * 1000)
        highest = max((r.id for r in records), default=0)
        rid = max(candidate, highest + 1, self._last_id + 1)
        self._last_id = rid
        return rid

    # ---------- interface ----------
    def load_all(self) -> List[RepairRecord]:
        with self._lock:
            self._check_open()
            return self._read()

    def get(self, record_id: int) -> Optional[RepairRecord]:
        with self._lock:
            self._check_open()
            return next((r for r in self._read() if r.id == record_id), None)

    def add(self, description, location, photo_before_ref, photo_after_ref) -> RepairRecord:
        # read, mutate and write under one lock so interleaved writers cannot lose updates
        with self._lock:
            self._check_open()
            records = self._read()
            record = RepairRecord(
                id=self._next_id(records),
                description=description,
                location=location,
                photo_before_ref=photo_before_ref,
                photo_after_ref=photo_after_ref,
                created_at=datetime.now(),
            )
            records.append(record)
            self._write(records)
            return record

    def remove(self, record_id: int) -> int:
        with self._lock:
            self._check_open()
            records = self._read()
            kept = [r for r in records if r.id != record_id]
            removed = len(records) - len(kept)
            if removed:
                self._write(kept)
            return removed


class SqlRecordStore(RecordStore):
    """Flask-SQLAlchemy backend. Every call needs an application context."""

    def __init__(self, db):
        self.db = db
        self._closed = True

    def open(self) -> None:
        try:
            self.db.create_all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"could not open database: {e}") from e
        self._closed = False
        logger.info("SQL record store at %s", self.db.engine.url)

    def close(self) -> None:
        if not self._closed:
            self.db.engine.dispose()
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise PersistenceError("record store is closed")

    def load_all(self) -> List[RepairRecord]:
        self._check_open()
        try:
            return [row.to_record() for row in Repair.query.all()]
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceError(f"could not read repairs: {e}") from e

    def get(self, record_id: int) -> Optional[RepairRecord]:
        self._check_open()
        try:
            row = self.db.session.get(Repair, record_id)
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceError(f"could not read repair {record_id}: {e}") from e
        return row.to_record() if row else None

    def add(self, description, location, photo_before_ref, photo_after_ref) -> RepairRecord:
        self._check_open()
        row = Repair(
            description=description,
            location=location,
            photo_before_ref=photo_before_ref,
            photo_after_ref=photo_after_ref,
        )
        try:
            self.db.session.add(row)
            self.db.session.commit()
            return row.to_record()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceError(f"could not save repair: {e}") from e

    def remove(self, record_id: int) -> int:
        self._check_open()
        try:
            # single DELETE statement; its rowcount tells us whether someone else got there first
            removed = Repair.query.filter_by(id=record_id).delete()
            self.db.session.commit()
            return removed
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceError(f"could not delete repair {record_id}: {e}") from e


def build_record_store(app) -> RecordStore:
    kind = app.config.get("RECORD_STORE", "json")
    if kind == "json":
        return JsonRecordStore(app.config["RECORD_STORE_FILE"])
    if kind == "sql":
        return SqlRecordStore(_db)
    raise RuntimeError(f"unknown RECORD_STORE {kind!r} (expected 'json' or 'sql')")
