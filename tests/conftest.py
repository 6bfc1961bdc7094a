from __future__ import annotations
from datetime import date, time
from types import SimpleNamespace
import pytest

from app import create_app
from extensions import db
from models import Period, SickReport, Teacher, TeacherType, TimetableSlot, WeekType

# 2026-01-12 — понедельник, ISO-неделя 3 (нечётная)
MONDAY_ODD = date(2026, 1, 12)
TUESDAY = date(2026, 1, 13)
SATURDAY = date(2026, 1, 10)


@pytest.fixture()
def app_ctx():
    app = create_app("dev")
    app.config.update(TESTING=True, SQLALCHEMY_DATABASE_URI="sqlite:///:memory:")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_ctx):
    return app_ctx.test_client()


def csrf(client) -> str:
    r = client.get("/api/v1/csrf")
    assert r.status_code == 200
    return r.get_json()["csrf"]


@pytest.fixture()
def school(app_ctx):
    """Tan (болеет 12–13.01) и Ahmad (болеет 12.01); Lim, Wong, Kumar на месте.

    Понедельник:
      P1: Tan 3A Math (ODD), Ahmad 1C Science, Wong 2B English
      P2: Tan 5A Math (EVEN), Lim 4C English
      P3: Tan 4A Math (ODD)
    """
    p1 = Period(number=1, start_time=time(7, 30), end_time=time(8, 20))
    p2 = Period(number=2, start_time=time(8, 20), end_time=time(9, 10))
    p3 = Period(number=3, start_time=time(9, 30), end_time=time(10, 20))
    tan = Teacher(name="Tan", type=TeacherType.REGULAR)
    lim = Teacher(name="Lim", type=TeacherType.REGULAR)
    wong = Teacher(name="Wong", type=TeacherType.REGULAR)
    ahmad = Teacher(name="Ahmad", type=TeacherType.REGULAR)
    kumar = Teacher(name="Kumar", type=TeacherType.PERMANENT_RELIEF)
    db.session.add_all([p1, p2, p3, tan, lim, wong, ahmad, kumar])
    db.session.flush()

    def slot(t, p, cls, subj, wt=WeekType.ALL, day=1):
        s = TimetableSlot(teacher_id=t.id, day_of_week=day, period_id=p.id,
                          week_type=wt, class_name=cls, subject=subj)
        db.session.add(s)
        return s

    tan_p1 = slot(tan, p1, "3A", "Math", WeekType.ODD)
    tan_p2 = slot(tan, p2, "5A", "Math", WeekType.EVEN)
    tan_p3 = slot(tan, p3, "4A", "Math", WeekType.ODD)
    ahmad_p1 = slot(ahmad, p1, "1C", "Science")
    wong_p1 = slot(wong, p1, "2B", "English")
    lim_p2 = slot(lim, p2, "4C", "English")
    db.session.flush()

    tan_sick = SickReport(teacher_id=tan.id, start_date=MONDAY_ODD, end_date=TUESDAY)
    db.session.add(tan_sick)
    db.session.flush()
    ahmad_sick = SickReport(teacher_id=ahmad.id, start_date=MONDAY_ODD, end_date=MONDAY_ODD)
    db.session.add(ahmad_sick)
    db.session.commit()

    return SimpleNamespace(
        p1=p1.id, p2=p2.id, p3=p3.id,
        tan=tan.id, lim=lim.id, wong=wong.id, ahmad=ahmad.id, kumar=kumar.id,
        tan_p1=tan_p1.id, tan_p2=tan_p2.id, tan_p3=tan_p3.id,
        ahmad_p1=ahmad_p1.id, wong_p1=wong_p1.id, lim_p2=lim_p2.id,
        tan_sick=tan_sick.id, ahmad_sick=ahmad_sick.id,
    )
