"""Application factory and app-wide configuration."""

import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask
from flask_cors import CORS

from compound_calc import configure_logging
from compound_calc.app.api.routes import api_bp
from compound_calc.config import Settings, load_settings
from compound_calc.core.history import FormStateStore, HistoryStore
from compound_calc.domain.storage import KeyValueStorage, build_storage

logger = logging.getLogger(__name__)


@dataclass
class CalculatorServices:
    settings: Settings
    history: HistoryStore
    form_state: FormStateStore


def create_app(
    storage: Optional[KeyValueStorage] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    """Build the Flask app instance; ``storage`` overrides the configured backend."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    if storage is None:
        storage = build_storage(settings.storage_backend, settings.storage_path)
    logger.info("Using %s storage for calculation history", type(storage).__name__)

    app = Flask(__name__)
    app.json.ensure_ascii = False

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.extensions["compound_calc"] = CalculatorServices(
        settings=settings,
        history=HistoryStore(storage),
        form_state=FormStateStore(storage),
    )
    app.register_blueprint(api_bp, url_prefix="/api")
    return app
