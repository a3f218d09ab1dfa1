"""
CRM Platform
Flask Application Factory.

Usage:
    from crm import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, abort, request, send_from_directory
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from crm.blueprints import register_blueprints, register_error_handlers
from crm.config import config
from crm.middleware.diagnostics import run_startup_diagnostics
from crm.middleware.jwt_auth import init_jwt_middleware
from crm.middleware.logging_config import configure_logging
from crm.middleware.rate_limiter import init_rate_limits
from crm.middleware.security_headers import init_security_headers
from crm.middleware.timing import init_request_timing
from crm.models import db

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # per-blueprint limits only
)


def _seed_default_admin(app):
    from crm.services.user_service import ensure_default_admin

    _, created = ensure_default_admin(
        app.config["DEFAULT_ADMIN_USERNAME"],
        app.config["DEFAULT_ADMIN_PASSWORD"],
        app.config.get("DEFAULT_ADMIN_EMAIL"),
    )
    if created:
        app.logger.warning(
            "Default admin '%s' created — change its password",
            app.config["DEFAULT_ADMIN_USERNAME"],
        )


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True, static_folder=None)
    cfg = config[config_name]
    app.config.from_object(cfg() if config_name == "production" else cfg)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request guards (input length + Content-Type) ─────────────────────
    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if request.content_length and "json" not in ct:
                abort(415, description="Content-Type must be application/json")

    # ── Middleware ───────────────────────────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_jwt_middleware(app)

    # ── Import all models so Alembic can detect them ─────────────────────
    from crm.models import auth as _auth_models               # noqa: F401
    from crm.models import client as _client_models           # noqa: F401
    from crm.models import opportunite as _opportunite_models  # noqa: F401
    from crm.models import rendez_vous as _rendez_vous_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    with app.app_context():
        db_uri = str(app.config["SQLALCHEMY_DATABASE_URI"])
        if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
            os.makedirs(app.instance_path, exist_ok=True)
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)
        else:
            if app.config.get("SEED_DEFAULT_ADMIN") and not app.testing:
                _seed_default_admin(app)

    # ── Blueprints + error mapping ───────────────────────────────────────
    register_blueprints(app)
    register_error_handlers(app)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("seed-admin")
    @click.option("--username", default=None, help="Defaults to DEFAULT_ADMIN_USERNAME.")
    @click.option("--password", default=None, help="Defaults to DEFAULT_ADMIN_PASSWORD.")
    def seed_admin_cmd(username, password):
        """Create the default admin account if it does not exist."""
        from crm.services.user_service import ensure_default_admin

        user, created = ensure_default_admin(
            username or app.config["DEFAULT_ADMIN_USERNAME"],
            password or app.config["DEFAULT_ADMIN_PASSWORD"],
            app.config.get("DEFAULT_ADMIN_EMAIL"),
        )
        click.echo(f"Admin '{user.username}' {'created' if created else 'already exists'}.")

    # ── SPA catch-all (pre-built browser client) ─────────────────────────
    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def spa(path):
        dist = app.config.get("CLIENT_DIST_DIR")
        if path.startswith("api/") or not dist or not os.path.isdir(dist):
            abort(404)
        if path and os.path.isfile(os.path.join(dist, path)):
            return send_from_directory(dist, path)
        return send_from_directory(dist, "index.html")

    # ── Startup diagnostics ──────────────────────────────────────────────
    run_startup_diagnostics(app)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
