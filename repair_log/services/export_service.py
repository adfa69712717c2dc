"""
repair_log/services/export_service.py
-------------------------------------
CSV export of repair records.
"""

import io
from datetime import datetime
from typing import Optional, Sequence

import pandas as pd

from ..domain import RepairRecord
from ..errors import EmptyExportError

CSV_COLUMNS = ["Date/Time", "Description", "Location", "Before Photo", "After Photo", "Id"]


def to_csv(records: Sequence[RepairRecord]) -> str:
    """
    Render records as CSV text, one row per record in the given order.

    Args:
        records: Records to export, already ordered by the caller.

    Returns:
        CSV text with a header row and the columns of ``CSV_COLUMNS``.

    Raises:
        EmptyExportError: when there is nothing to export.
    """
    if not records:
        raise EmptyExportError()

    data = [
        [
            r.created_at.isoformat(),
            r.description,
            r.location,
            r.photo_before_ref,
            r.photo_after_ref,
            r.id,
        ]
        for r in records
    ]

    df = pd.DataFrame(data, columns=CSV_COLUMNS)
    buffer = io.StringIO()
    df.to_csv(buffer, index=False, lineterminator="\n")
    return buffer.getvalue()


def export_filename(now: Optional[datetime] = None) -> str:
    ts = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"repair-report-{ts}.csv"
