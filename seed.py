"""
Idempotent seed-скрипт с демо-школой.
Запуск:
  python seed.py --reset          # дропнуть и пересоздать БД + демо-данные
  python seed.py                  # мягкое наполнение недостающих данных (idempotent)
  python seed.py --sick "Mr Tan Wei Ming" --date 2026-01-12   # + больничный на день
"""
from __future__ import annotations
from datetime import date, time
import argparse

from app import create_app
from extensions import db
from models import Period, SickReport, Teacher, TeacherType, TimetableSlot, WeekType

PERIODS = [
    (1, time(7, 30), time(8, 20)),
    (2, time(8, 20), time(9, 10)),
    (3, time(9, 30), time(10, 20)),
    (4, time(10, 20), time(11, 10)),
    (5, time(11, 30), time(12, 20)),
    (6, time(12, 20), time(13, 10)),
    (7, time(14, 0), time(14, 50)),
]

TEACHERS = [
    ("Mr Tan Wei Ming", TeacherType.REGULAR),
    ("Ms Lim Siew Hua", TeacherType.REGULAR),
    ("Mr Ahmad bin Hassan", TeacherType.REGULAR),
    ("Ms Priya Nair", TeacherType.REGULAR),
    ("Mr David Chen", TeacherType.REGULAR),
    ("Ms Sarah Wong", TeacherType.REGULAR),
    ("Mr Kumar Rajan", TeacherType.PERMANENT_RELIEF),
    ("Ms Fatimah bte Ali", TeacherType.PERMANENT_RELIEF),
]

# (учитель, день, номер пары, класс, предмет[, чётность])
TIMETABLE = [
    ("Mr Tan Wei Ming", 1, 1, "3A", "Math"),
    ("Mr Tan Wei Ming", 1, 2, "3B", "Math"),
    ("Mr Tan Wei Ming", 1, 3, "4A", "Math"),
    ("Mr Tan Wei Ming", 2, 1, "3A", "Math"),
    ("Mr Tan Wei Ming", 2, 4, "4B", "Math"),
    ("Mr Tan Wei Ming", 3, 2, "3B", "Math"),
    ("Mr Tan Wei Ming", 3, 5, "4A", "Math"),
    ("Mr Tan Wei Ming", 4, 1, "3A", "Math"),
    ("Mr Tan Wei Ming", 4, 3, "3B", "Math"),
    ("Mr Tan Wei Ming", 5, 2, "4B", "Math"),

    ("Ms Lim Siew Hua", 1, 3, "3A", "English"),
    ("Ms Lim Siew Hua", 1, 4, "3B", "English"),
    ("Ms Lim Siew Hua", 2, 2, "4A", "English"),
    ("Ms Lim Siew Hua", 2, 5, "3A", "English"),
    ("Ms Lim Siew Hua", 3, 1, "3B", "English"),
    ("Ms Lim Siew Hua", 4, 4, "4A", "English"),
    ("Ms Lim Siew Hua", 5, 1, "3A", "English"),
    ("Ms Lim Siew Hua", 5, 3, "4B", "English"),

    ("Mr Ahmad bin Hassan", 1, 5, "3A", "Science"),
    ("Mr Ahmad bin Hassan", 1, 6, "4A", "Science"),
    ("Mr Ahmad bin Hassan", 2, 3, "3B", "Science"),
    ("Mr Ahmad bin Hassan", 3, 4, "4B", "Science"),
    ("Mr Ahmad bin Hassan", 4, 2, "3A", "Science"),
    ("Mr Ahmad bin Hassan", 5, 5, "4A", "Science"),

    ("Ms Priya Nair", 1, 1, "4A", "History"),
    ("Ms Priya Nair", 2, 4, "3A", "History"),
    ("Ms Priya Nair", 3, 3, "3B", "History"),
    ("Ms Priya Nair", 4, 5, "4B", "History"),
    ("Ms Priya Nair", 5, 1, "4A", "History"),

    ("Mr David Chen", 1, 4, "4B", "Geography"),
    ("Mr David Chen", 2, 1, "3B", "Geography"),
    ("Mr David Chen", 3, 6, "3A", "Geography"),
    ("Mr David Chen", 4, 4, "4A", "Geography", WeekType.ODD),
    ("Mr David Chen", 4, 4, "4B", "Geography", WeekType.EVEN),
    ("Mr David Chen", 5, 3, "3B", "Geography"),

    ("Ms Sarah Wong", 1, 2, "3A", "Chinese"),
    ("Ms Sarah Wong", 2, 3, "4B", "Chinese"),
    ("Ms Sarah Wong", 3, 1, "3A", "Chinese"),
    ("Ms Sarah Wong", 4, 6, "3B", "Chinese"),
    ("Ms Sarah Wong", 5, 4, "4A", "Chinese"),
]


def get_or_create(model, defaults=None, **by):
    """Идемпотентное создание по уникальным ключам."""
    inst = db.session.query(model).filter_by(**by).first()
    if inst:
        return inst, False
    data = dict(by)
    if defaults:
        data.update(defaults)
    inst = model(**data)
    db.session.add(inst)
    db.session.flush()
    return inst, True


def seed_school() -> dict:
    periods = {}
    for number, start, end in PERIODS:
        p, _ = get_or_create(Period, number=number, defaults=dict(start_time=start, end_time=end))
        periods[number] = p

    teachers = {}
    for name, kind in TEACHERS:
        t, _ = get_or_create(Teacher, name=name, defaults=dict(type=kind))
        teachers[name] = t

    created = 0
    for row in TIMETABLE:
        name, day, number, class_name, subject = row[:5]
        week_type = row[5] if len(row) > 5 else WeekType.ALL
        _, is_new = get_or_create(
            TimetableSlot,
            teacher_id=teachers[name].id, day_of_week=day,
            period_id=periods[number].id, week_type=week_type,
            defaults=dict(class_name=class_name, subject=subject),
        )
        created += int(is_new)

    db.session.commit()
    return {"periods": len(periods), "teachers": len(teachers), "slots_created": created}


def report_sick(teacher_name: str, on: date, days: int = 1) -> SickReport:
    from blueprints.directory.schemas import SickReportIn
    from blueprints.directory.services import create_sick_report

    t = Teacher.query.filter_by(name=teacher_name).first()
    if t is None:
        raise SystemExit(f"unknown teacher: {teacher_name}")
    return create_sick_report(SickReportIn(teacher_id=t.id, start_date=on, number_of_days=days), max_days=14)


# ---- main ----
def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="drop + create + full seed (demo)")
    parser.add_argument("--sick", metavar="NAME", help="file a sick report for this teacher")
    parser.add_argument("--date", type=date.fromisoformat, default=date.today(), help="sick report start date")
    parser.add_argument("--days", type=int, default=1)
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            db.drop_all()
        db.create_all()
        stats = seed_school()
        print(f"[seed] {stats['periods']} periods, {stats['teachers']} teachers, "
              f"{stats['slots_created']} new timetable slots")
        if args.sick:
            sr = report_sick(args.sick, args.date, args.days)
            print(f"[seed] sick report #{sr.id}: {args.sick} {sr.start_date}..{sr.end_date}")

if __name__ == "__main__":
    main()
