"""
Application shell tests — health, request guards, headers, error mapping, CLI.
"""

import json
import logging

from conftest import bearer
from crm.middleware.logging_config import JSONFormatter, ReadableFormatter
from crm.models.auth import User
from crm.services import stats_service
from crm.utils.crypto import verify_password


class TestHealth:
    def test_health(self, client):
        res = client.get("/api/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_ready(self, client):
        assert client.get("/api/health/ready").get_json() == {"status": "ok"}

    def test_live_checks_database(self, client):
        res = client.get("/api/health/live")
        assert res.status_code == 200
        assert res.get_json()["checks"]["database"]["status"] == "ok"


class TestRequestGuards:
    def test_non_json_body_rejected(self, client, regular_user):
        res = client.post(
            "/api/clients", data="nom=Durand",
            content_type="text/plain", headers=bearer(regular_user),
        )
        assert res.status_code == 415

    def test_body_too_large(self, client, regular_user, app):
        payload = "x" * (app.config["MAX_CONTENT_LENGTH"] + 1)
        res = client.post(
            "/api/clients", data=payload, content_type="application/json", headers=bearer(regular_user),
        )
        assert res.status_code == 413


class TestResponses:
    def test_security_headers(self, client):
        res = client.get("/api/health")
        assert res.headers["X-Content-Type-Options"] == "nosniff"
        assert res.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert "Content-Security-Policy" in res.headers
        assert res.headers["X-Request-ID"]
        assert "X-Request-Duration-Ms" in res.headers

    def test_request_id_echoed(self, client):
        res = client.get("/api/health", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"

    def test_unknown_api_route_is_json_404(self, client, regular_user):
        res = client.get("/api/nothing-here", headers=bearer(regular_user))
        assert res.status_code == 404
        assert "error" in res.get_json()

    def test_no_client_bundle_means_404(self, client):
        assert client.get("/").status_code == 404

    def test_unexpected_error_is_generic_500(self, client, regular_user, monkeypatch):
        def boom(user):
            raise RuntimeError("database password is hunter2")

        monkeypatch.setattr(stats_service, "get_dashboard_stats", boom)
        res = client.get("/api/stats", headers=bearer(regular_user))
        assert res.status_code == 500
        body = res.get_json()
        assert body["error"] == "Internal server error"
        assert "hunter2" not in res.get_data(as_text=True)


class TestSeedAdminCommand:
    def test_creates_then_reports_existing(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["seed-admin", "--password", "Sup3rSecret!"])
        assert result.exit_code == 0
        assert "created" in result.output

        admin = User.query.filter_by(username="admin").one()
        assert admin.role == "admin"
        assert verify_password("Sup3rSecret!", admin.password_hash)

        result = runner.invoke(args=["seed-admin"])
        assert "already exists" in result.output
        assert User.query.filter_by(username="admin").count() == 1


class TestLogFormatters:
    def _record(self, **extra):
        record = logging.makeLogRecord({
            "name": "crm.services.client_service", "levelno": logging.INFO,
            "levelname": "INFO", "msg": "Client %s", "args": ("created",),
        })
        record.__dict__.update(extra)
        return record

    def test_json_keeps_request_and_entity_fields(self):
        record = self._record(event_type="client_created", client_id="c-1", user_id=None,
                              request_id="r-9", duration_ms=12.5)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["msg"] == "Client created"
        assert entry["event"] == "client_created"
        assert entry["client_id"] == "c-1"
        assert entry["request_id"] == "r-9"
        assert "user_id" not in entry

    def test_json_ignores_unlisted_extras(self):
        entry = json.loads(JSONFormatter().format(self._record(password="secret")))
        assert "password" not in entry

    def test_readable_line(self):
        line = ReadableFormatter(color=False).format(
            self._record(event_type="client_created", client_id="c-1", duration_ms=3.2)
        )
        assert "INFO" in line
        assert "Client created (client_created) [3ms] client_id=c-1" in line
