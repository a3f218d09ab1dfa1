"""
Startup diagnostics — runs once when the Flask app starts.

Checks critical dependencies and logs a summary banner.
"""

import logging
import sys

from flask import Flask
from sqlalchemy import inspect as sa_inspect

from crm.models import db

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return

    issues: list[str] = []

    with app.app_context():
        py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        db_status = "ok"
        db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
        db_type = "PostgreSQL" if "postgresql" in db_uri else "SQLite" if "sqlite" in db_uri else "unknown"
        try:
            db.session.execute(db.text("SELECT 1"))
        except Exception as exc:
            db_status = "FAILED"
            issues.append(f"Database unreachable: {exc}")

        try:
            table_count = len(sa_inspect(db.engine).get_table_names())
            if table_count == 0:
                issues.append("No tables found — run 'flask db upgrade'")
        except Exception:
            table_count = "?"

        limiter_storage = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
        if app.config.get("JWT_SECRET_KEY") == app.config.get("SECRET_KEY"):
            issues.append("JWT_SECRET_KEY not set — tokens are signed with SECRET_KEY")

        client_dist = app.config.get("CLIENT_DIST_DIR") or "not configured"

        banner = f"""
╔══════════════════════════════════════════════════════════════╗
║  CRM Platform — Startup Diagnostics                          ║
╠══════════════════════════════════════════════════════════════╣
║  Python      : {py:<46s}║
║  Environment : {app.config.get('ENV_NAME', 'development'):<46s}║
║  Debug       : {str(app.debug):<46s}║
║  Database    : {f'{db_type} ({db_status})':<46s}║
║  Tables      : {str(table_count):<46s}║
║  Limiter     : {limiter_storage.split('://')[0]:<46s}║
║  Client dist : {str(client_dist)[:46]:<46s}║
╚══════════════════════════════════════════════════════════════╝"""
        logger.info(banner)

        if issues:
            logger.warning("Startup issues detected:")
            for issue in issues:
                logger.warning("  ⚠ %s", issue)
        else:
            logger.info("✅ All startup checks passed")
