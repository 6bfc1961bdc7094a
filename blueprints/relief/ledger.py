# blueprints/relief/ledger.py
from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from errors import ConflictError, InvalidAssignmentError, NotFoundError
from extensions import db
from models import (
    AuditLog, Period, ReliefAssignment, SickReport, Teacher, TimetableSlot, WeekType,
)
from .index import teacher_busy_at
from .parity import effective_week_type

log = logging.getLogger(__name__)


def _audit(action: str, entity_id: int | None, payload: dict | None = None):
    db.session.add(AuditLog(action=action, entity="relief_assignment", entity_id=entity_id, payload=payload or {}))


def _check_slot_applies(report: SickReport, slot: TimetableSlot, on: date, week_type: WeekType) -> None:
    details = {"sick_report_id": report.id, "slot_id": slot.id, "date": on.isoformat()}
    if slot.teacher_id != report.teacher_id:
        raise InvalidAssignmentError("SLOT_NOT_OF_ABSENT_TEACHER", details)
    if not (report.start_date <= on <= report.end_date):
        raise InvalidAssignmentError("DATE_OUTSIDE_SICK_REPORT", details)
    if slot.day_of_week != on.isoweekday():
        raise InvalidAssignmentError("SLOT_NOT_ON_DATE", details)
    if slot.week_type not in (WeekType.ALL, week_type):
        raise InvalidAssignmentError("SLOT_NOT_IN_WEEK", {**details, "week_type": week_type.value})


def _is_absent(teacher_id: int, on: date) -> bool:
    return db.session.query(SickReport.id).filter(
        SickReport.teacher_id == teacher_id,
        SickReport.start_date <= on,
        SickReport.end_date >= on,
    ).first() is not None


def create_assignment(
    sick_report_id: int,
    slot_id: int,
    covering_teacher_id: int,
    on: date,
    week_type: Optional[WeekType] = None,
) -> ReliefAssignment:
    """Назначить замену на один урок в одну дату.

    Проверка и вставка идут одной транзакцией; окончательно дубли отсекают
    уникальные индексы (teacher, date, period) и (slot, date). Если
    транзакция не прошла, назначения нет.
    """
    report = db.session.get(SickReport, sick_report_id)
    if report is None:
        raise NotFoundError("SICK_REPORT_NOT_FOUND", {"sick_report_id": sick_report_id})
    slot = db.session.get(TimetableSlot, slot_id)
    if slot is None:
        raise NotFoundError("SLOT_NOT_FOUND", {"slot_id": slot_id})
    teacher = db.session.get(Teacher, covering_teacher_id)
    if teacher is None:
        raise NotFoundError("TEACHER_NOT_FOUND", {"teacher_id": covering_teacher_id})

    wt = effective_week_type(on, week_type)
    _check_slot_applies(report, slot, on, wt)

    details = {"teacher_id": teacher.id, "date": on.isoformat(), "period_id": slot.period_id}
    try:
        clash = ReliefAssignment.query.filter_by(
            covering_teacher_id=teacher.id, date=on, period_id=slot.period_id
        ).first()
        if clash is not None:
            raise ConflictError("TEACHER_ALREADY_COVERING", {**details, "assignment_id": clash.id})
        taken = ReliefAssignment.query.filter_by(timetable_slot_id=slot.id, date=on).first()
        if taken is not None:
            raise ConflictError("SLOT_ALREADY_COVERED", {"slot_id": slot.id, "date": on.isoformat(),
                                                         "assignment_id": taken.id})
        if _is_absent(teacher.id, on):
            raise ConflictError("TEACHER_ABSENT", details)
        if teacher_busy_at(teacher.id, on.isoweekday(), slot.period_id, wt):
            raise ConflictError("TEACHER_BUSY", details)

        a = ReliefAssignment(
            sick_report_id=report.id,
            timetable_slot_id=slot.id,
            covering_teacher_id=teacher.id,
            period_id=slot.period_id,
            date=on,
        )
        db.session.add(a)
        db.session.flush()
        _audit("create", a.id, {"slot_id": slot.id, "teacher_id": teacher.id, "date": on.isoformat()})
        db.session.commit()
    except ConflictError as e:
        db.session.rollback()
        log.warning("relief assignment rejected", extra={"event": "assignment_rejected", "code": e.code, **details})
        raise
    except IntegrityError:
        # параллельный запрос успел первым: смотрим, какой из индексов сработал
        db.session.rollback()
        taken = ReliefAssignment.query.filter_by(timetable_slot_id=slot.id, date=on).first()
        if taken is not None:
            code = "SLOT_ALREADY_COVERED"
            details = {"slot_id": slot.id, "date": on.isoformat(), "assignment_id": taken.id}
        else:
            code = "TEACHER_ALREADY_COVERING"
        log.warning("relief assignment race lost", extra={"event": "assignment_rejected", "code": code, **details})
        raise ConflictError(code, details)

    log.info("relief assignment created", extra={"event": "assignment_created", "assignment_id": a.id, **details})
    return a


def delete_assignment(assignment_id: int) -> None:
    a = db.session.get(ReliefAssignment, assignment_id)
    if a is None:
        raise NotFoundError("ASSIGNMENT_NOT_FOUND", {"assignment_id": assignment_id})
    payload = {"slot_id": a.timetable_slot_id, "teacher_id": a.covering_teacher_id, "date": a.date.isoformat()}
    db.session.delete(a)
    _audit("delete", assignment_id, payload)
    db.session.commit()
    log.info("relief assignment deleted", extra={"event": "assignment_deleted", "assignment_id": assignment_id})


def list_assignments(on: date) -> List[ReliefAssignment]:
    return (ReliefAssignment.query
            .join(Period, Period.id == ReliefAssignment.period_id)
            .filter(ReliefAssignment.date == on)
            .order_by(Period.number.asc(), ReliefAssignment.id.asc())
            .all())


def assignment_to_dict(a: ReliefAssignment) -> dict:
    return {
        "id": a.id,
        "sick_report_id": a.sick_report_id,
        "slot_id": a.timetable_slot_id,
        "covering_teacher_id": a.covering_teacher_id,
        "period_id": a.period_id,
        "date": a.date.isoformat(),
        "created_at": a.created_at.isoformat() if a.created_at else None,
    }
