from __future__ import annotations
import json, logging
from datetime import datetime

from flask import g, jsonify, request
from werkzeug.exceptions import BadRequest, NotFound
from werkzeug.wrappers.response import Response

from flask_wtf.csrf import generate_csrf
from errors import ReliefError
from extensions import csrf

from . import bp                 # используем bp из __init__.py
from . import api_bp

log = logging.getLogger(__name__)

# поля из extra=..., которые попадают в JSON-строку лога
LOG_EXTRA_KEYS = (
    "event", "path", "method", "status", "duration_ms",
    "date", "week_type", "cards", "uncovered", "covered",
    "assignment_id", "teacher_id", "period_id", "slot_ids", "code",
)

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.utcnow().isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in LOG_EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, ensure_ascii=False, default=str)

def _setup_structured_logging(app):
    logger = app.logger
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        # логгеры модулей (blueprints.*) пишут через тот же handler
        pkg = logging.getLogger("blueprints")
        pkg.addHandler(handler)
        pkg.setLevel(logging.INFO)

def _error_body(code: str, details=None) -> dict:
    return {"ok": False, "errors": [{"code": code, "details": details}]}

@api_bp.get("/csrf")
@csrf.exempt          # токен выдаём без проверки
def get_csrf():
    token = generate_csrf()
    return jsonify({"csrf": token})

@bp.before_app_request
def _start_timer():
    g._req_start = datetime.utcnow()

@bp.after_app_request
def _log_request(response: Response):
    try:
        duration_ms = int((datetime.utcnow() - g._req_start).total_seconds() * 1000)
    except AttributeError:
        duration_ms = None
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    log.info("request handled", extra=extra)
    return response

@bp.app_errorhandler(ReliefError)
def handle_relief_error(err: ReliefError):
    log.warning("request rejected: %s", err.code, extra={"event": "request_rejected", "code": err.code})
    return jsonify(_error_body(err.code, err.details)), err.status_code

@bp.app_errorhandler(BadRequest)
def handle_bad_request(err: BadRequest):
    # сюда же попадает CSRFError (подкласс BadRequest)
    return jsonify(_error_body("BAD_REQUEST", getattr(err, "description", None))), 400

@bp.app_errorhandler(NotFound)
def handle_not_found(err: NotFound):
    return jsonify(_error_body("NOT_FOUND")), 404

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": datetime.utcnow().isoformat(timespec="seconds") + "Z",
    })
