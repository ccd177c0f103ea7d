from __future__ import annotations

import atexit
import importlib
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .attendance.controller import register as register_attendance
from .common.http import CONTAINER_KEY, error_body
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.exception("Domain error: %s", exc)
        return jsonify(error_body(exc.code, str(exc), exc.status_code)), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        code = exc.code or 500
        name = (exc.name or "HTTP error").upper().replace(" ", "_")
        return jsonify(error_body(name, exc.description or exc.name, code)), code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return jsonify(error_body("INTERNAL_ERROR", "Internal server error", 500)), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("Demo seed ready")

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            token_max_age_seconds=int(getattr(settings, "TOKEN_MAX_AGE_SECONDS")),
            notify_async=bool(getattr(settings, "NOTIFY_ASYNC", False)),
            notify_workers=int(getattr(settings, "NOTIFY_WORKERS", 4)),
            leave_lock_timeout=int(getattr(settings, "LEAVE_LOCK_TIMEOUT_SECONDS")),
            company_info={
                "name": getattr(settings, "COMPANY_NAME", ""),
                "email": getattr(settings, "COMPANY_EMAIL", ""),
                "website": getattr(settings, "COMPANY_WEBSITE", ""),
            },
        )
        # Drain queued notifications and audit writes before the interpreter exits.
        atexit.register(container.dispatcher.shutdown)

    app.extensions[CONTAINER_KEY] = container
    _register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    register_users(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)

    return app


def run() -> None:
    """Development server entry point (`hrms-api`)."""

    app = create_app()
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
    )


if __name__ == "__main__":
    run()
