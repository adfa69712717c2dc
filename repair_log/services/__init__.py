"""Service layer (business logic)."""

from .asset_store import AssetStore
from .record_store import RecordStore, JsonRecordStore, SqlRecordStore, build_record_store
from .repair_service import RepairService, Rollback
from .export_service import to_csv, export_filename, CSV_COLUMNS
