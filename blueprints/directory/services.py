# blueprints/directory/services.py
from __future__ import annotations
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError

from errors import ConflictError, NotFoundError, UnprocessableError
from extensions import db
from models import Period, SickReport, Teacher, TimetableSlot, WeekType
from .schemas import SickReportIn, TimetableSlotIn


def save_slot(data: TimetableSlotIn) -> tuple[TimetableSlot, bool]:
    """Upsert по (teacher, day, period, week_type). Возвращает (slot, created).

    ALL и ODD/EVEN на одну и ту же пару учителя взаимоисключающие,
    иначе учитель окажется в двух классах одновременно.
    """
    if db.session.get(Teacher, data.teacher_id) is None:
        raise NotFoundError("TEACHER_NOT_FOUND", {"teacher_id": data.teacher_id})
    if db.session.get(Period, data.period_id) is None:
        raise NotFoundError("PERIOD_NOT_FOUND", {"period_id": data.period_id})

    same_cell = TimetableSlot.query.filter_by(
        teacher_id=data.teacher_id, day_of_week=data.day_of_week, period_id=data.period_id,
    ).all()
    if data.week_type == WeekType.ALL:
        clash = [s for s in same_cell if s.week_type != WeekType.ALL]
    else:
        clash = [s for s in same_cell if s.week_type == WeekType.ALL]
    if clash:
        raise ConflictError("SLOT_WEEK_TYPE_CLASH", {
            "slot_ids": [s.id for s in clash],
            "week_type": data.week_type.value,
        })

    slot = next((s for s in same_cell if s.week_type == data.week_type), None)
    created = slot is None
    if created:
        slot = TimetableSlot(
            teacher_id=data.teacher_id, day_of_week=data.day_of_week,
            period_id=data.period_id, week_type=data.week_type,
        )
        db.session.add(slot)
    slot.class_name = data.class_name
    slot.subject = data.subject
    try:
        db.session.commit()
    except IntegrityError:
        # параллельный upsert той же ячейки
        db.session.rollback()
        raise ConflictError("UNIQUE_CONSTRAINT", {
            "teacher_id": data.teacher_id, "day_of_week": data.day_of_week,
            "period_id": data.period_id, "week_type": data.week_type.value,
        })
    return slot, created


def create_sick_report(data: SickReportIn, max_days: int) -> SickReport:
    teacher = db.session.get(Teacher, data.teacher_id)
    if teacher is None:
        raise NotFoundError("TEACHER_NOT_FOUND", {"teacher_id": data.teacher_id})

    if data.end_date is not None:
        end = data.end_date
    else:
        end = data.start_date + timedelta(days=data.number_of_days - 1)
    days = (end - data.start_date).days + 1
    if days > max_days:
        raise UnprocessableError("SICK_REPORT_TOO_LONG", {"days": days, "max_days": max_days})

    # пересечения с уже поданными больничными допускаются
    sr = SickReport(teacher_id=teacher.id, start_date=data.start_date, end_date=end)
    db.session.add(sr)
    db.session.commit()
    return sr


def sick_reports_on(on: date) -> list[SickReport]:
    return (SickReport.query
            .filter(SickReport.start_date <= on, SickReport.end_date >= on)
            .order_by(SickReport.start_date.asc(), SickReport.id.asc())
            .all())
