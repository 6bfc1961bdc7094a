# blueprints/relief/routes.py
from __future__ import annotations
from datetime import date, datetime
import datetime as dt
from typing import Optional
from zoneinfo import ZoneInfo

from flask import Blueprint, abort, current_app, jsonify, request
from pydantic import BaseModel, ValidationError

from models import WeekType
from . import ledger
from .parity import parse_week_type
from .services import resolve_dashboard

api_bp = Blueprint("relief_api", __name__)


class ReliefAssignmentIn(BaseModel):
    sick_report_id: int
    slot_id: int
    covering_teacher_id: int
    date: dt.date  # имя поля совпадает с типом
    week_type: Optional[WeekType] = None


def today() -> date:
    return datetime.now(ZoneInfo(current_app.config["SCHOOL_TZ"])).date()

def parse_day_args() -> tuple[date, Optional[WeekType]]:
    d = request.args.get("date")
    try:
        at = date.fromisoformat(d) if d else today()
    except ValueError:
        abort(400, description="Bad date")
    try:
        wt = parse_week_type(request.args.get("week_type"))
    except ValueError:
        abort(400, description="Bad week_type")
    return at, wt

def no_store(resp):
    resp.headers["Cache-Control"] = "no-store"
    return resp


@api_bp.get("/dashboard")
def dashboard():
    at, wt = parse_day_args()
    return no_store(jsonify(resolve_dashboard(at, wt).to_dict()))

@api_bp.get("/relief-assignments")
def list_assignments():
    at, _ = parse_day_args()
    items = [ledger.assignment_to_dict(a) for a in ledger.list_assignments(at)]
    return no_store(jsonify({"date": at.isoformat(), "items": items}))

@api_bp.post("/relief-assignments")
def create_assignment():
    payload = request.get_json(silent=True) or {}
    try:
        parsed = ReliefAssignmentIn.model_validate(payload)
    except ValidationError as ve:
        return jsonify({"ok": False, "errors": [{"code": "VALIDATION_ERROR",
                                                 "details": ve.errors(include_url=False, include_context=False)}]}), 422
    if parsed.week_type == WeekType.ALL:
        abort(400, description="Bad week_type")
    a = ledger.create_assignment(
        parsed.sick_report_id, parsed.slot_id, parsed.covering_teacher_id, parsed.date, parsed.week_type,
    )
    return jsonify(ledger.assignment_to_dict(a)), 201

@api_bp.delete("/relief-assignments/<int:assignment_id>")
def delete_assignment(assignment_id: int):
    ledger.delete_assignment(assignment_id)
    return jsonify({"ok": True})
