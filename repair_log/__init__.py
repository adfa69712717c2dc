import os

from flask import Flask

from .config import Config
from .extensions import db


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    # ===== default storage locations live in the instance folder =====
    if not app.config.get("RECORD_STORE_FILE"):
        app.config["RECORD_STORE_FILE"] = os.path.join(app.instance_path, "repairs.json")
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        db_path = os.path.join(app.instance_path, "repairs.db")
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"
    if not app.config.get("UPLOAD_FOLDER"):
        app.config["UPLOAD_FOLDER"] = os.path.join(app.instance_path, "uploads")

    # init extensions
    db.init_app(app)

    # stores are opened once here and handed to the service explicitly;
    # closed by the caller on shutdown (run.py, test teardown)
    from .services import AssetStore, RepairService, build_record_store

    store = build_record_store(app)
    assets = AssetStore(app.config["UPLOAD_FOLDER"])
    with app.app_context():
        assets.open()
        store.open()
    app.extensions["repair_service"] = RepairService(store, assets)

    def _close_store():
        with app.app_context():
            store.close()

    app.extensions["repair_store_close"] = _close_store

    # register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    # register error handlers
    from .errors import register_error_handlers
    register_error_handlers(app)

    # no caching
    @app.after_request
    def add_header(response):
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    app.logger.info(
        "repair log ready: store=%s uploads=%s",
        app.config["RECORD_STORE"],
        app.config["UPLOAD_FOLDER"],
    )
    return app
