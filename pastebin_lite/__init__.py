from __future__ import annotations

import os

from flask import Flask
from flask_cors import CORS

from .api.pastes import api_bp
from .api.views import views_bp
from .config import get_config
from .db import SessionLocal, init_db
from .observability import init_observability
from .repositories import InMemoryPasteStore, PasteStore, SqlPasteStore
from .services.paste_service import PasteService
from .worker.expiry_worker import start_expiry_worker


def _build_store(app: Flask) -> PasteStore:
    backend = app.config.get("PASTE_STORE_BACKEND", "memory")
    if backend == "memory":
        return InMemoryPasteStore()
    if backend == "sql":
        init_db(app)
        return SqlPasteStore(session_factory=SessionLocal)
    raise RuntimeError(f"Unknown PASTE_STORE_BACKEND {backend!r}; expected 'memory' or 'sql'.")


def create_app(env_name: str | None = None, store: PasteStore | None = None) -> Flask:
    """
    Application factory for the Flask backend.

    The configuration is selected based on the provided ``env_name`` or,
    if not given, the ``APP_ENV`` environment variable (falling back to
    ``development``). A ``store`` may be passed in to bypass the configured
    backend.
    """
    if env_name is None:
        env_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    app_config = get_config(env_name)
    app.config.from_object(app_config)

    CORS(app)

    # Initialize infrastructure layers
    init_observability(app)
    if store is None:
        store = _build_store(app)
    app.extensions["paste_store"] = store
    app.extensions["paste_service"] = PasteService(store=store)

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(views_bp)

    # Start background expiry worker (disabled in testing)
    if not app.config.get("TESTING", False):
        start_expiry_worker(app)

    return app
