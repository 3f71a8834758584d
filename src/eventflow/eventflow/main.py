from __future__ import annotations

import atexit
import importlib
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_user, list_tables
from .events.controller import register as register_events
from .users.controller import register as register_users

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def configure_logging(app: Flask, settings) -> None:
    level = getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]")

    # Module loggers all live under the package logger.
    package_logger = logging.getLogger(__name__.rpartition(".")[0])
    package_logger.setLevel(level)

    log_file = getattr(settings, "LOG_FILE", None)
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_048_576, backupCount=10)
        file_handler.setFormatter(fmt)
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        package_logger.addHandler(file_handler)

    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    configure_logging(app, settings)
    app.logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
        app.logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    admin_email = getattr(settings, "ADMIN_EMAIL", None)
    admin_password = getattr(settings, "ADMIN_PASSWORD", None)
    if admin_email and admin_password:
        ensure_admin_user(db_config, email=admin_email, password=admin_password)

    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
        app.logger.info("Demo seed ready")

    container = build_container(db_config=db_config, settings=settings)
    app.extensions["eventflow"] = container

    register_users(app, container)
    register_events(app, container)
    register_attendance(app, container)

    def _shutdown() -> None:
        container.views.close_all()
        container.feed.close()

    atexit.register(_shutdown)
    return app
