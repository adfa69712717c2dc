# repair_log/routes/api.py
from datetime import date

from flask import Blueprint, current_app, request

from ..domain import RepairQuery, UploadedAsset
from ..errors import ValidationError
from ..http import api_ok, csv_attachment
from ..services import RepairService, export_filename, to_csv

api = Blueprint("api", __name__)

# Multipart field names; the second name is what the earlier front end sends
FIELD_DESCRIPTION = ("description", "descripcion")
FIELD_LOCATION = ("location", "ubicacion")
FIELD_PHOTO_BEFORE = ("photo_before", "fotoAntes")
FIELD_PHOTO_AFTER = ("photo_after", "fotoDespues")


def get_repair_service() -> RepairService:
    return current_app.extensions["repair_service"]


def _form_value(names):
    for name in names:
        if name in request.form:
            return request.form.get(name)
    return None


def _file_value(names):
    for name in names:
        f = request.files.get(name)
        if f and f.filename:
            return UploadedAsset.from_file_storage(f, field=names[0])
    return None


def _date_arg(name):
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


# ==========================================
# API
# ==========================================
@api.route("/", methods=["GET"])
def api_root():
    return api_ok({"ok": True}, status=200)


def list_from_request():
    query = RepairQuery(
        q=request.args.get("q", ""),
        date_from=_date_arg("date_from"),
        date_to=_date_arg("date_to"),
    )
    return get_repair_service().list(query)


def create_from_request():
    return get_repair_service().create(
        description=_form_value(FIELD_DESCRIPTION),
        location=_form_value(FIELD_LOCATION),
        before=_file_value(FIELD_PHOTO_BEFORE),
        after=_file_value(FIELD_PHOTO_AFTER),
    )


@api.route("/repairs", methods=["GET"])
def api_repairs_list():
    records = list_from_request()
    return api_ok([r.to_dict() for r in records])


@api.route("/repairs", methods=["POST"])
def api_repairs_create():
    record = create_from_request()
    return api_ok(record.to_dict(), status=201)


@api.route("/repairs/<int:repair_id>", methods=["GET"])
def api_repairs_get(repair_id):
    return api_ok(get_repair_service().get(repair_id).to_dict())


@api.route("/repairs/<int:repair_id>", methods=["DELETE"])
def api_repairs_delete(repair_id):
    current_app.logger.info("DELETE repair %s", repair_id)
    get_repair_service().delete(repair_id)
    return api_ok({"success": True, "id": repair_id, "message": "Repair deleted."})


@api.route("/repairs/export", methods=["GET"])
def api_repairs_export():
    records = get_repair_service().list()
    text = to_csv(records)
    current_app.logger.info("exported %d repairs as CSV", len(records))
    return csv_attachment(text, export_filename())
