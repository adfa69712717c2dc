"""Repair record lifecycle: create / list / get / delete.

Coordinates the record store and the asset store. A create either leaves one
record plus two files behind or nothing at all; a delete removes the record
first and then makes a best effort to remove its two files.
"""

import logging
from typing import Callable, List, Optional, Tuple

from ..domain import RepairQuery, RepairRecord, UploadedAsset, normalize_location
from ..errors import AssetError, NotFound, ValidationError
from .asset_store import AssetStore
from .record_store import RecordStore

logger = logging.getLogger(__name__)

MSG_ONLY_IMAGES = "Only images are allowed (jpeg, jpg, png)."
MSG_REQUIRED = "All fields are required."


class Rollback:
    """
    Undo steps for a multi-step operation.
    Steps run newest first; a failing step is logged and the next one still runs.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self._steps: List[Tuple[str, Callable[[], object]]] = []

    def add(self, label: str, undo: Callable[[], object]) -> None:
        self._steps.append((label, undo))

    def run(self) -> None:
        while self._steps:
            label, undo = self._steps.pop()
            try:
                undo()
                logger.info("[%s] rolled back: %s", self.operation, label)
            except Exception:
                logger.warning("[%s] rollback step failed: %s", self.operation, label, exc_info=True)


class RepairService:
    def __init__(self, store: RecordStore, assets: AssetStore):
        self.store = store
        self.assets = assets

    # ---------- create ----------
    def create(
        self,
        description: Optional[str],
        location: Optional[str],
        before: Optional[UploadedAsset],
        after: Optional[UploadedAsset],
    ) -> RepairRecord:
        # cheap checks first: file types, then required fields
        for asset in (before, after):
            if asset is not None and not asset.is_allowed_image():
                raise ValidationError(MSG_ONLY_IMAGES)

        description = (description or "").strip()
        location = normalize_location(location)

        rollback = Rollback("create")
        try:
            if not description or before is None or after is None:
                raise ValidationError(MSG_REQUIRED)

            before_ref = self.assets.save(before)
            rollback.add(f"remove {before_ref}", lambda: self.assets.remove(before_ref))

            after_ref = self.assets.save(after)
            rollback.add(f"remove {after_ref}", lambda: self.assets.remove(after_ref))

            record = self.store.add(description, location, before_ref, after_ref)

        except Exception:
            rollback.run()
            raise

        logger.info("created repair %s (%s, %s)", record.id, record.photo_before_ref, record.photo_after_ref)
        return record

    # ---------- read ----------
    def list(self, query: Optional[RepairQuery] = None) -> List[RepairRecord]:
        records = self.store.load_all()
        if query is not None and not query.is_empty():
            records = [r for r in records if query.matches(r)]
        # newest first; recomputed every call, storage order means nothing
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    def get(self, record_id: int) -> RepairRecord:
        record = self.store.get(record_id)
        if record is None:
            raise NotFound(f"Repair {record_id} not found.")
        return record

    # ---------- delete ----------
    def delete(self, record_id: int) -> RepairRecord:
        """
        Record first, then files. Once the record is gone it can no longer
        point at a missing photo; a file that cannot be removed is only
        logged and becomes an orphan.
        """
        record = self.get(record_id)

        if self.store.remove(record_id) == 0:
            # someone else deleted it between the lookup and now
            raise NotFound(f"Repair {record_id} not found.")

        for ref in record.photo_refs:
            try:
                if not self.assets.remove(ref):
                    logger.warning("[delete] repair %s: asset %s was already missing", record_id, ref)
            except AssetError:
                logger.warning("[delete] repair %s: could not remove asset %s", record_id, ref, exc_info=True)

        logger.info("deleted repair %s", record_id)
        return record
