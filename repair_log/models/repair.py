# repair_log/models/repair.py
from datetime import datetime

from ..extensions import db
from ..domain import RepairRecord


# ==========================================
# Repair record: Repair
# ==========================================
class Repair(db.Model):
    __tablename__ = "repairs"

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.Text, nullable=False)
    location = db.Column(db.String(120), nullable=False)

    # generated file names inside UPLOAD_FOLDER, set once
    photo_before_ref = db.Column(db.String(255), nullable=False)
    photo_after_ref = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)

    # AUTOINCREMENT: sqlite never hands out the id of a deleted row again
    __table_args__ = {"sqlite_autoincrement": True}

    def to_record(self) -> RepairRecord:
        return RepairRecord(
            id=self.id,
            description=self.description,
            location=self.location,
            photo_before_ref=self.photo_before_ref,
            photo_after_ref=self.photo_after_ref,
            created_at=self.created_at,
        )
