# repair_log/domain.py
import os
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Tuple, Dict, Any

UNSPECIFIED_LOCATION = "unspecified"
ALLOWED_IMAGE_TYPES = ("jpeg", "jpg", "png")


def normalize_location(raw: Optional[str]) -> str:
    location = (raw or "").strip()
    return location or UNSPECIFIED_LOCATION


def parse_coordinates(location: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    "40.7, -74.0" -> (40.7, -74.0)
    Anything that is not a valid latitude/longitude pair -> None
    """
    parts = (location or "").split(",")
    if len(parts) != 2:
        return None
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return lat, lng


@dataclass(frozen=True)
class UploadedAsset:
    """
    One uploaded photo, already read from the request
    """
    field: str
    filename: str
    mimetype: str
    data: bytes

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower()

    def is_allowed_image(self) -> bool:
        # Both the declared MIME type and the extension must look like an image
        ext = self.extension.lstrip(".")
        mimetype = (self.mimetype or "").lower()
        return ext in ALLOWED_IMAGE_TYPES and any(t in mimetype for t in ALLOWED_IMAGE_TYPES)

    @staticmethod
    def from_file_storage(file_storage, field: str) -> Optional["UploadedAsset"]:
        if not file_storage or not file_storage.filename:
            return None
        file_storage.seek(0)
        return UploadedAsset(
            field=field,
            filename=file_storage.filename,
            mimetype=file_storage.mimetype or "",
            data=file_storage.read(),
        )


@dataclass(frozen=True)
class RepairRecord:
    """
    One before/after repair. Immutable once stored; only deletion is allowed.
    """
    id: int
    description: str
    location: str
    photo_before_ref: str
    photo_after_ref: str
    created_at: datetime

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        return parse_coordinates(self.location)

    @property
    def photo_refs(self) -> Tuple[str, str]:
        return self.photo_before_ref, self.photo_after_ref

    def to_dict(self) -> Dict[str, Any]:
        coords = self.coordinates
        return {
            "id": self.id,
            "description": self.description,
            "location": self.location,
            "photoBeforeRef": self.photo_before_ref,
            "photoAfterRef": self.photo_after_ref,
            "createdAt": self.created_at.isoformat(),
            "coordinates": list(coords) if coords else None,
        }

    def to_document(self) -> Dict[str, Any]:
        """Shape written to the JSON record store."""
        doc = self.to_dict()
        doc.pop("coordinates")
        return doc

    def to_legacy_dict(self) -> Dict[str, Any]:
        """Field names the first front end (client.js) reads."""
        return {
            "id": self.id,
            "descripcion": self.description,
            "ubicacion": self.location,
            "fotoAntes": self.photo_before_ref,
            "fotoDespues": self.photo_after_ref,
            "timestamp": self.created_at.isoformat(),
        }

    @staticmethod
    def from_dict(doc: Dict[str, Any]) -> "RepairRecord":
        """
        Validate a stored document. Also reads the field names written by
        the earlier JavaScript server (descripcion / fotoAntes / timestamp ...).
        Raises ValueError on anything malformed.
        """
        if not isinstance(doc, dict):
            raise ValueError(f"record must be an object, got {type(doc).__name__}")

        def pick(*keys):
            for k in keys:
                if doc.get(k) not in (None, ""):
                    return doc[k]
            return None

        rid = doc.get("id")
        if isinstance(rid, bool) or not isinstance(rid, int):
            raise ValueError(f"record id must be an integer: {rid!r}")

        description = pick("description", "descripcion")
        before = pick("photoBeforeRef", "fotoAntes")
        after = pick("photoAfterRef", "fotoDespues")
        created = pick("createdAt", "timestamp")
        for name, value in (("description", description), ("photoBeforeRef", before),
                            ("photoAfterRef", after), ("createdAt", created)):
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"record {rid}: missing {name}")

        location = pick("location", "ubicacion")
        if location is not None and not isinstance(location, str):
            raise ValueError(f"record {rid}: location must be text")

        return RepairRecord(
            id=rid,
            description=description,
            location=normalize_location(location),
            photo_before_ref=before,
            photo_after_ref=after,
            created_at=parse_timestamp(created),
        )


def parse_timestamp(raw: str) -> datetime:
    # datetime.fromisoformat() rejects the trailing "Z" on older interpreters
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    # Mixed naive/aware values cannot be compared; store everything naive local time
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


@dataclass
class RepairQuery:
    """
    List filter: description text + inclusive date range (whole days)
    """
    q: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def has_text(self) -> bool:
        return bool(self.q.strip())

    def is_empty(self) -> bool:
        return not self.has_text() and self.date_from is None and self.date_to is None

    def matches(self, record: RepairRecord) -> bool:
        if self.has_text() and self.q.strip().lower() not in record.description.lower():
            return False
        if self.date_from and record.created_at < datetime.combine(self.date_from, time.min):
            return False
        if self.date_to and record.created_at > datetime.combine(self.date_to, time.max):
            return False
        return True
