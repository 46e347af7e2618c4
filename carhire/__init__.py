import logging
import os

from flask import Flask

from .controllers.admin import bp as admin_bp
from .controllers.errors import register_error_handlers
from .controllers.rentals import bp as rentals_bp
from .controllers.vehicles import bp as vehicles_bp
from .models.store import Store, DEFAULT_DATA_PATH
from .services import build_services


def _env_config() -> dict:
    return {
        "SECRET_KEY": os.getenv("SECRET_KEY", "dev-secret-change-me"),
        "DATA_PATH": os.getenv("CARHIRE_DATA_PATH", str(DEFAULT_DATA_PATH)),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "APP_ENV": os.getenv("APP_ENV", "development"),
    }


def create_app(config: dict | None = None, store: Store | None = None):
    """
    Application factory. ``config`` overrides environment settings; ``store``
    lets callers share an already-open Store (tests, scripts).
    """
    app = Flask(__name__)
    app.config.update(_env_config())
    if config:
        app.config.update(config)

    logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger("carhire").setLevel(app.config["LOG_LEVEL"])

    if store is None:
        store = Store(app.config["DATA_PATH"], autosave=app.config["APP_ENV"] != "test")
    app.extensions["carhire"] = build_services(store)

    app.register_blueprint(rentals_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(admin_bp)
    register_error_handlers(app)

    return app
