# test_health.py
from sqlalchemy.exc import OperationalError

from zocpos.errors import is_connection_error


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_db_check(client):
    r = client.get("/api/test-db")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Database connection successful", "environment": "dev"}


def test_db_check_reports_failure(client, app, monkeypatch):
    def boom():
        raise OperationalError("SELECT 1", {}, Exception("could not connect to server: Connection refused"))
    monkeypatch.setattr(app.state.db, "ping", boom)

    r = client.get("/api/test-db")
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Database connection failed"


def test_database_errors_are_reported_as_json(client, app, monkeypatch):
    from zocpos.routers import menu

    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("no such table: menu_items"))

    monkeypatch.setattr(menu, "paginate", broken_query)
    r = client.get("/api/menu-items")
    assert r.status_code == 500
    assert r.json() == {"detail": "Database query failed", "error_code": "DB_ERROR", "path": "/api/menu-items"}


def test_connection_error_detection():
    assert is_connection_error(OperationalError("x", {}, Exception("connection timed out")))
    assert not is_connection_error(OperationalError("x", {}, Exception("no such column: foo")))


def test_cors_headers(client):
    r = client.options("/api/orders", headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "GET",
    })
    assert r.status_code == 200
    assert "access-control-allow-origin" in r.headers
