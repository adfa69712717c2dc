# tests/conftest.py
import io
import os
import sys

import pytest

# Ensure project root on sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from repair_log import create_app
from repair_log.domain import UploadedAsset
from repair_log.extensions import db

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"fake jpeg body" + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake png body"


@pytest.fixture(params=["json", "sql"])
def app(request, tmp_path):
    app = create_app({
        "TESTING": True,
        "RECORD_STORE": request.param,
        "RECORD_STORE_FILE": str(tmp_path / "repairs.json"),
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'repairs.db'}",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    })
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    app.extensions["repair_store_close"]()
    ctx.pop()


@pytest.fixture()
def service(app):
    return app.extensions["repair_service"]


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def upload_dir(app):
    return app.config["UPLOAD_FOLDER"]


@pytest.fixture()
def make_asset():
    def _make(field="photo_before", filename="before.jpg", mimetype="image/jpeg", data=JPEG_BYTES):
        return UploadedAsset(field=field, filename=filename, mimetype=mimetype, data=data)
    return _make


@pytest.fixture()
def before(make_asset):
    return make_asset()


@pytest.fixture()
def after(make_asset):
    return make_asset(field="photo_after", filename="after.png", mimetype="image/png", data=PNG_BYTES)


def upload_form(description="Leaky pipe", location="40.7,-74.0",
                before=("before.jpg", "image/jpeg"), after=("after.png", "image/png"),
                names=("description", "location", "photo_before", "photo_after")):
    """Multipart body for the create endpoint; None leaves a field out."""
    data = {}
    if description is not None:
        data[names[0]] = description
    if location is not None:
        data[names[1]] = location
    if before is not None:
        data[names[2]] = (io.BytesIO(JPEG_BYTES), before[0], before[1])
    if after is not None:
        data[names[3]] = (io.BytesIO(PNG_BYTES), after[0], after[1])
    return data
