import os

class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "json" (single document file) or "sql" (repairs table)
    RECORD_STORE = os.environ.get("RECORD_STORE", "json").strip().lower()

    # Paths left empty are resolved against the instance folder in create_app()
    RECORD_STORE_FILE = os.environ.get("RECORD_STORE_FILE", "")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "")
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "")

    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 16 * 1024 * 1024))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
