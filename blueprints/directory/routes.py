from __future__ import annotations
import logging
from datetime import date
from typing import Any, Dict, List
from pydantic import ValidationError

from flask import (
    abort,
    current_app,
    jsonify,
    request,
    url_for,
)
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query

from . import bp
from . import services as svc
from .schemas import (
    PeriodIn, PeriodOut,
    SickReportIn, SickReportOut,
    TeacherIn, TeacherOut,
    TimetableSlotIn, TimetableSlotOut,
)
from blueprints.relief.parity import parse_week_type
from extensions import db
from models import Period, SickReport, Teacher, TimetableSlot

log = logging.getLogger(__name__)

# ----------------------- Helpers -----------------------
def ok(data: Any, status: int = 200):
    return jsonify(data), status

def created(location: str, data: Any):
    resp = jsonify(data)
    resp.status_code = 201
    resp.headers["Location"] = location
    return resp

def error(msg: str, status: int = 400, code: str | None = None, details: Any = None):
    return jsonify({"ok": False, "errors": [{"code": code or "BAD_REQUEST", "details": details or msg}]}), status

def _paginate(query: Query, serializer, *, page: int, per_page: int, fields: List[str]):
    total = query.count()
    rows = query.offset((page - 1) * per_page).limit(per_page).all()
    items = [
        serializer.model_validate(_row_to_dict(r, fields)).model_dump(mode="json")
        for r in rows
    ]
    return {"items": items, "meta": {"page": page, "per_page": per_page, "total": total}}

def _row_to_dict(row, fields: List[str]) -> Dict[str, Any]:
    return {f: getattr(row, f) for f in fields}

def _page_args() -> tuple[int, int]:
    try:
        page = max(1, int(request.args.get("page", 1)))
        per_page = min(100, max(1, int(request.args.get("per_page", 50))))
    except ValueError:
        abort(400, description="Bad pagination")
    return page, per_page

def _search_filter(model, q: str):
    fields_map = {
        Teacher: [Teacher.name],
        TimetableSlot: [TimetableSlot.class_name, TimetableSlot.subject],
    }
    term = str(q).strip()
    conds = [col.like(f"%{term}%") for col in fields_map.get(model, [])]
    return or_(*conds) if conds else None

def _handle_integrity_error(ex: IntegrityError):
    log.warning("integrity error: %s", getattr(ex, "orig", ex))
    return error("Unique constraint violation", status=409, code="UNIQUE_CONSTRAINT")

def _pydantic_errors_safe(ve: ValidationError):
    return ve.errors(include_url=False, include_context=False)

def _validation_error(ve: ValidationError):
    return error("validation_error", status=422, code="VALIDATION_ERROR", details=_pydantic_errors_safe(ve))

def _teacher_out(t: Teacher) -> dict:
    return TeacherOut.model_validate({"id": t.id, "name": t.name, "type": t.type}).model_dump(mode="json")

def _period_out(p: Period) -> dict:
    return PeriodOut.model_validate({"id": p.id, "number": p.number,
                                     "start_time": p.start_time, "end_time": p.end_time}).model_dump(mode="json")

def _slot_out(s: TimetableSlot) -> dict:
    return TimetableSlotOut.model_validate({
        "id": s.id, "teacher_id": s.teacher_id, "day_of_week": s.day_of_week,
        "period_id": s.period_id, "period_number": s.period.number, "week_type": s.week_type,
        "class_name": s.class_name, "subject": s.subject,
    }).model_dump(mode="json")

def _sick_report_out(sr: SickReport) -> dict:
    return SickReportOut.model_validate({
        "id": sr.id, "teacher_id": sr.teacher_id, "teacher_name": sr.teacher.name,
        "start_date": sr.start_date, "end_date": sr.end_date,
    }).model_dump(mode="json")

# ----------------------- CRUD JSON API -----------------------
# URL: /directory/api/<resource>[/<id>]

# ---- Teachers ----
@bp.get("/api/teachers")
def api_teachers_list():
    q = request.args.get("q", "")
    page, per_page = _page_args()
    s = db.session.query(Teacher)
    if q:
        cond = _search_filter(Teacher, q)
        if cond is not None: s = s.filter(cond)
    s = s.order_by(Teacher.name.asc(), Teacher.id.asc())
    data = _paginate(s, TeacherOut, page=page, per_page=per_page, fields=["id", "name", "type"])
    return ok(data)

@bp.post("/api/teachers")
def api_teachers_create():
    payload = request.get_json(silent=True) or {}
    try:
        parsed = TeacherIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_error(ve)
    t = Teacher(name=parsed.name, type=parsed.type)
    db.session.add(t)
    db.session.commit()
    return created(url_for("directory.api_teachers_get", id=t.id), _teacher_out(t))

@bp.get("/api/teachers/<int:id>")
def api_teachers_get(id: int):
    t = db.session.get(Teacher, id) or abort(404)
    return ok(_teacher_out(t))

@bp.put("/api/teachers/<int:id>")
def api_teachers_update(id: int):
    payload = request.get_json(silent=True) or {}
    try:
        parsed = TeacherIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_error(ve)
    t = db.session.get(Teacher, id) or abort(404)
    t.name = parsed.name
    t.type = parsed.type
    db.session.commit()
    return ok({"ok": True})

@bp.delete("/api/teachers/<int:id>")
def api_teachers_delete(id: int):
    # каскадом уходят расписание, больничные и назначения на замену
    t = db.session.get(Teacher, id) or abort(404)
    db.session.delete(t)
    db.session.commit()
    return "", 204

# ---- Periods ----
@bp.get("/api/periods")
def api_periods_list():
    items = [_period_out(p) for p in Period.query.order_by(Period.number.asc()).all()]
    return ok({"items": items})

@bp.post("/api/periods")
def api_periods_create():
    payload = request.get_json(silent=True) or {}
    try:
        parsed = PeriodIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_error(ve)
    p = Period(number=parsed.number, start_time=parsed.start_time, end_time=parsed.end_time)
    db.session.add(p)
    try:
        db.session.commit()
    except IntegrityError as ex:
        db.session.rollback()
        return _handle_integrity_error(ex)
    return created(url_for("directory.api_periods_get", id=p.id), _period_out(p))

@bp.get("/api/periods/<int:id>")
def api_periods_get(id: int):
    p = db.session.get(Period, id) or abort(404)
    return ok(_period_out(p))

@bp.put("/api/periods/<int:id>")
def api_periods_update(id: int):
    payload = request.get_json(silent=True) or {}
    try:
        parsed = PeriodIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_error(ve)
    p = db.session.get(Period, id) or abort(404)
    p.number = parsed.number
    p.start_time = parsed.start_time
    p.end_time = parsed.end_time
    try:
        db.session.commit()
    except IntegrityError as ex:
        db.session.rollback()
        return _handle_integrity_error(ex)
    return ok({"ok": True})

@bp.delete("/api/periods/<int:id>")
def api_periods_delete(id: int):
    p = db.session.get(Period, id) or abort(404)
    db.session.delete(p)
    db.session.commit()
    return "", 204

# ---- Timetable slots ----
@bp.get("/api/timetable")
def api_timetable_list():
    try:
        teacher_id = int(request.args["teacher_id"])
    except (KeyError, ValueError):
        abort(400, description="teacher_id is required")
    try:
        wt = parse_week_type(request.args.get("week_type"))
    except ValueError:
        abort(400, description="Bad week_type")
    s = (TimetableSlot.query.join(Period, Period.id == TimetableSlot.period_id)
         .filter(TimetableSlot.teacher_id == teacher_id))
    if wt is not None:
        s = s.filter(TimetableSlot.week_type == wt)
    s = s.order_by(TimetableSlot.day_of_week.asc(), Period.number.asc(), TimetableSlot.id.asc())
    return ok({"items": [_slot_out(x) for x in s.all()]})

@bp.post("/api/timetable")
def api_timetable_upsert():
    payload = request.get_json(silent=True) or {}
    try:
        parsed = TimetableSlotIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_error(ve)
    slot, is_new = svc.save_slot(parsed)
    if is_new:
        return created(url_for("directory.api_timetable_get", id=slot.id), _slot_out(slot))
    return ok(_slot_out(slot))

@bp.get("/api/timetable/<int:id>")
def api_timetable_get(id: int):
    s = db.session.get(TimetableSlot, id) or abort(404)
    return ok(_slot_out(s))

@bp.delete("/api/timetable/<int:id>")
def api_timetable_delete(id: int):
    s = db.session.get(TimetableSlot, id) or abort(404)
    db.session.delete(s)
    db.session.commit()
    return "", 204

# ---- Sick reports ----
@bp.get("/api/sick-reports")
def api_sick_reports_list():
    try:
        on = date.fromisoformat(request.args["date"])
    except (KeyError, ValueError):
        abort(400, description="Bad date")
    return ok({"items": [_sick_report_out(sr) for sr in svc.sick_reports_on(on)]})

@bp.post("/api/sick-reports")
def api_sick_reports_create():
    payload = request.get_json(silent=True) or {}
    try:
        parsed = SickReportIn.model_validate(payload)
    except ValidationError as ve:
        return _validation_error(ve)
    sr = svc.create_sick_report(parsed, current_app.config.get("SICK_REPORT_MAX_DAYS", 14))
    return created(url_for("directory.api_sick_reports_get", id=sr.id), _sick_report_out(sr))

@bp.get("/api/sick-reports/<int:id>")
def api_sick_reports_get(id: int):
    sr = db.session.get(SickReport, id) or abort(404)
    return ok(_sick_report_out(sr))

@bp.delete("/api/sick-reports/<int:id>")
def api_sick_reports_delete(id: int):
    sr = db.session.get(SickReport, id) or abort(404)
    db.session.delete(sr)
    db.session.commit()
    return "", 204
