# repair_log/http.py
from flask import Response, jsonify


def api_ok(data=None, status=200):
    resp = jsonify(data if data is not None else {})
    resp.status_code = status
    return resp


def api_error(status, code, message, details=None):
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    resp = jsonify(payload)
    resp.status_code = status
    return resp


def csv_attachment(text: str, filename: str):
    resp = Response(text.encode("utf-8"), mimetype="text/csv")
    resp.headers["Content-Type"] = "text/csv; charset=utf-8"
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


def legacy_error(status, code, message):
    # the first front end reads `message` at the top level
    payload = {"message": message, "error": {"code": code, "message": message}}
    resp = jsonify(payload)
    resp.status_code = status
    return resp
