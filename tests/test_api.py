# tests/test_api.py
import io
import os

import pandas as pd
import pytest

from conftest import JPEG_BYTES, upload_form

LEGACY_NAMES = ("descripcion", "ubicacion", "fotoAntes", "fotoDespues")


def _create(client, **kwargs):
    return client.post("/api/repairs", data=upload_form(**kwargs), content_type="multipart/form-data")


def test_api_root(client):
    resp = client.get("/api/")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_create_and_list(client, upload_dir):
    resp = _create(client)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["description"] == "Leaky pipe"
    assert body["location"] == "40.7,-74.0"
    assert body["coordinates"] == [40.7, -74.0]
    assert isinstance(body["id"], int)
    assert body["createdAt"]
    assert sorted(os.listdir(upload_dir)) == sorted([body["photoBeforeRef"], body["photoAfterRef"]])

    listed = client.get("/api/repairs").get_json()
    assert [r["id"] for r in listed] == [body["id"]]
    assert set(listed[0]) == {
        "id", "description", "location", "photoBeforeRef", "photoAfterRef", "createdAt", "coordinates",
    }
    assert resp.headers["Cache-Control"].startswith("no-store")


def test_create_missing_description(client, upload_dir):
    resp = _create(client, description="", location="")

    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "VALIDATION_ERROR"
    assert os.listdir(upload_dir) == []
    assert client.get("/api/repairs").get_json() == []


def test_create_missing_photo(client, upload_dir):
    resp = _create(client, after=None)
    assert resp.status_code == 400
    assert os.listdir(upload_dir) == []


def test_create_rejects_non_image(client):
    resp = _create(client, before=("notes.txt", "text/plain"))
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Only images are allowed (jpeg, jpg, png)."


def test_get_and_delete(client, upload_dir):
    rid = _create(client).get_json()["id"]

    assert client.get(f"/api/repairs/{rid}").status_code == 200

    resp = client.delete(f"/api/repairs/{rid}")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True
    assert os.listdir(upload_dir) == []

    assert client.get(f"/api/repairs/{rid}").status_code == 404
    again = client.delete(f"/api/repairs/{rid}")
    assert again.status_code == 404
    assert again.get_json()["error"]["code"] == "NOT_FOUND"


def test_delete_unknown(client):
    _create(client)
    resp = client.delete("/api/repairs/999999")
    assert resp.status_code == 404
    assert len(client.get("/api/repairs").get_json()) == 1


def test_list_filters(client):
    _create(client, description="Leaky pipe")
    _create(client, description="Broken window")

    found = client.get("/api/repairs?q=window").get_json()
    assert [r["description"] for r in found] == ["Broken window"]

    bad = client.get("/api/repairs?date_from=yesterday")
    assert bad.status_code == 400


def test_export_empty(client):
    resp = client.get("/api/repairs/export")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "EMPTY_EXPORT"


def test_export_two_records(client):
    first = _create(client, description="Leaky pipe").get_json()
    second = _create(client, description="Broken window", location="").get_json()

    resp = client.get("/api/repairs/export")

    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "text/csv; charset=utf-8"
    assert "attachment;" in resp.headers["Content-Disposition"]
    assert "repair-report-" in resp.headers["Content-Disposition"]

    df = pd.read_csv(io.StringIO(resp.data.decode("utf-8")), dtype=str, keep_default_na=False)
    assert list(df.columns) == ["Date/Time", "Description", "Location", "Before Photo", "After Photo", "Id"]
    assert len(df) == 2
    # newest first
    assert df["Id"].tolist() == [str(second["id"]), str(first["id"])]
    assert df.iloc[0]["Location"] == "unspecified"
    assert df.iloc[1]["Before Photo"] == first["photoBeforeRef"]


def test_uploaded_photo_lookup(client):
    body = _create(client).get_json()

    resp = client.get(f"/uploads/{body['photoBeforeRef']}")
    assert resp.status_code == 200
    assert resp.data == JPEG_BYTES

    missing = client.get("/uploads/missing.jpg")
    assert missing.status_code == 404
    # Werkzeug default page, not a JSON error body
    assert not missing.is_json


def test_legacy_paths(client, upload_dir):
    resp = client.post(
        "/upload",
        data=upload_form(description="Fuga", location="", names=LEGACY_NAMES),
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert set(body) == {"id", "descripcion", "ubicacion", "fotoAntes", "fotoDespues", "timestamp"}
    assert body["descripcion"] == "Fuga"
    assert body["ubicacion"] == "unspecified"
    assert body["fotoAntes"].startswith("photo_before-")
    assert body["timestamp"]

    listed = client.get("/reparaciones").get_json()
    assert listed == [body]

    assert client.get("/download-csv").status_code == 200
    deleted = client.delete(f"/reparaciones/{body['id']}")
    assert deleted.status_code == 200
    assert deleted.get_json()["message"]

    empty = client.get("/download-csv")
    assert empty.status_code == 404
    assert empty.get_json()["message"] == "Nothing to export."
    assert os.listdir(upload_dir) == []


def test_legacy_errors_carry_top_level_message(client, upload_dir):
    resp = client.post(
        "/upload",
        data=upload_form(description="", names=LEGACY_NAMES),
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "All fields are required."
    assert os.listdir(upload_dir) == []

    missing = client.delete("/reparaciones/999999")
    assert missing.status_code == 404
    assert missing.get_json()["message"] == "Repair 999999 not found."


def test_corrupt_store_is_server_error(app, client):
    if app.config["RECORD_STORE"] != "json":
        pytest.skip("JSON backend only")
    with open(app.config["RECORD_STORE_FILE"], "w", encoding="utf-8") as f:
        f.write("[{broken")

    resp = client.get("/api/repairs")
    assert resp.status_code == 500
    assert resp.get_json()["error"]["code"] == "PERSISTENCE_ERROR"
