# repair_log/routes/main.py
from flask import Blueprint, current_app, send_from_directory
from werkzeug.utils import secure_filename

from ..http import api_ok
from .api import api_repairs_export, create_from_request, get_repair_service, list_from_request

main = Blueprint("main", __name__)


# ==========================================
# Uploaded photos (read-only)
# ==========================================
@main.route("/uploads/<path:filename>")
def uploaded_photo(filename):
    fname = secure_filename(filename)
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], fname)


# ==========================================
# Legacy paths used by the first front end
# (descripcion / ubicacion / fotoAntes / fotoDespues / timestamp,
#  errors as a top-level "message")
# ==========================================
# legacy alias; remove after frontend migrated
@main.route("/upload", methods=["POST"])
def legacy_upload():
    record = create_from_request()
    return api_ok(record.to_legacy_dict(), status=201)


# legacy alias; remove after frontend migrated
@main.route("/reparaciones", methods=["GET"])
def legacy_list():
    return api_ok([r.to_legacy_dict() for r in list_from_request()])


# legacy alias; remove after frontend migrated
@main.route("/reparaciones/<int:repair_id>", methods=["DELETE"])
def legacy_delete(repair_id):
    current_app.logger.info("DELETE repair %s (legacy path)", repair_id)
    get_repair_service().delete(repair_id)
    return api_ok({"message": "Repair deleted."})


# legacy alias; remove after frontend migrated
@main.route("/download-csv", methods=["GET"])
def legacy_download_csv():
    return api_repairs_export()
