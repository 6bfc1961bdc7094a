from __future__ import annotations
import json, logging

from blueprints.core.routes import JSONFormatter


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.get_json()
    assert body["status"] == "ok"
    assert body["ts"].endswith("Z")

def test_csrf_token(client):
    r = client.get("/api/v1/csrf")
    assert r.status_code == 200
    assert r.get_json()["csrf"]

def test_unknown_route_json(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.get_json() == {"ok": False, "errors": [{"code": "NOT_FOUND", "details": None}]}

def test_json_formatter_extra_keys():
    rec = logging.LogRecord("blueprints.relief.ledger", logging.INFO, __file__, 1,
                            "relief assignment %s", ("created",), None)
    rec.event = "assignment_created"
    rec.assignment_id = 7
    rec.secret = "skip me"
    out = json.loads(JSONFormatter().format(rec))
    assert out["msg"] == "relief assignment created"
    assert out["level"] == "INFO"
    assert out["logger"] == "blueprints.relief.ledger"
    assert out["event"] == "assignment_created"
    assert out["assignment_id"] == 7
    assert "secret" not in out

def test_json_handler_not_duplicated(app_ctx):
    from app import create_app
    create_app("dev")
    handlers = [h for h in logging.getLogger("blueprints").handlers if isinstance(h.formatter, JSONFormatter)]
    assert len(handlers) == 1
