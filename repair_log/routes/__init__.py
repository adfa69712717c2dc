"""Blueprint registration.

`main` serves uploaded photos and the legacy front-end paths; `api` is the
JSON API mounted under /api.
"""

from .main import main as main_bp
from .api import api as api_bp


def register_blueprints(app):
    app.register_blueprint(main_bp)

    # API
    app.register_blueprint(api_bp, url_prefix="/api")
