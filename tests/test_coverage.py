from __future__ import annotations
from datetime import date, time
import pytest

from errors import ConflictError
from extensions import db
from models import SickReport, TeacherType, WeekType
from blueprints.relief import ledger, services as svc
from blueprints.relief.index import SlotRow, TimetableIndex
from conftest import MONDAY_ODD, SATURDAY, TUESDAY


def _names(outcome):
    return [c.name for c in outcome.candidates]

def _card(dashboard, teacher_id):
    return next(c for c in dashboard.cards if c.teacher_id == teacher_id)


def test_scenario_a_two_uncovered_periods(school):
    d = svc.resolve_dashboard(MONDAY_ODD)
    assert d.is_weekend is False
    assert d.week_type == WeekType.ODD

    tan = _card(d, school.tan)
    assert tan.teacher_name == "Tan"
    assert tan.sick_report_id == school.tan_sick
    assert [p.slot.period_number for p in tan.periods] == [1, 3]
    assert all(isinstance(p, svc.UncoveredSlot) for p in tan.periods)
    # P1: Wong ведёт свой урок, Ahmad болеет
    assert _names(tan.periods[0]) == ["Kumar", "Lim"]
    assert _names(tan.periods[1]) == ["Kumar", "Lim", "Wong"]
    assert d.total_uncovered == 3
    assert d.total_covered == 0

def test_cards_follow_sick_report_order(school):
    d = svc.resolve_dashboard(MONDAY_ODD)
    assert [c.teacher_id for c in d.cards] == [school.tan, school.ahmad]

def test_scenario_b_double_booking_rejected(school):
    ledger.create_assignment(school.tan_sick, school.tan_p1, school.lim, MONDAY_ODD)
    with pytest.raises(ConflictError) as exc:
        ledger.create_assignment(school.ahmad_sick, school.ahmad_p1, school.lim, MONDAY_ODD)
    assert exc.value.code == "TEACHER_ALREADY_COVERING"

    d = svc.resolve_dashboard(MONDAY_ODD)
    p1 = _card(d, school.tan).periods[0]
    assert isinstance(p1, svc.CoveredSlot)
    assert p1.covering_teacher_name == "Lim"
    assert _names(_card(d, school.ahmad).periods[0]) == ["Kumar"]
    # в P3 Lim свободна
    assert "Lim" in _names(_card(d, school.tan).periods[1])
    assert (d.total_covered, d.total_uncovered) == (1, 2)

def test_scenario_c_unassign_returns_candidate(school):
    a = ledger.create_assignment(school.tan_sick, school.tan_p1, school.lim, MONDAY_ODD)
    ledger.delete_assignment(a.id)

    d = svc.resolve_dashboard(MONDAY_ODD)
    assert isinstance(_card(d, school.tan).periods[0], svc.UncoveredSlot)
    assert "Lim" in _names(_card(d, school.ahmad).periods[0])
    assert d.total_covered == 0

def test_weekend_short_circuit(school, monkeypatch):
    def boom(*a, **kw):
        raise AssertionError("store must not be read on weekends")
    monkeypatch.setattr(svc, "build_timetable_index", boom)
    monkeypatch.setattr(svc, "load_sick_reports", boom)

    d = svc.resolve_dashboard(SATURDAY)
    assert d.is_weekend is True
    assert d.week_type is None
    assert d.cards == []
    assert d.to_dict()["total_uncovered"] == 0
    assert svc.resolve_dashboard(date(2026, 1, 11)).is_weekend  # воскресенье

def test_sick_teacher_without_lessons_has_no_card(school):
    d = svc.resolve_dashboard(TUESDAY)
    assert d.is_weekend is False
    assert d.cards == []

def test_week_type_override(school):
    d = svc.resolve_dashboard(MONDAY_ODD, WeekType.EVEN)
    assert d.week_type == WeekType.EVEN
    tan = _card(d, school.tan)
    assert [p.slot.slot_id for p in tan.periods] == [school.tan_p2]
    # Lim ведёт P2 в любую неделю
    assert _names(tan.periods[0]) == ["Kumar", "Wong"]

def test_idempotent_reads(school):
    ledger.create_assignment(school.tan_sick, school.tan_p3, school.wong, MONDAY_ODD)
    assert svc.resolve_dashboard(MONDAY_ODD).to_dict() == svc.resolve_dashboard(MONDAY_ODD).to_dict()

def test_candidate_soundness(school):
    ledger.create_assignment(school.tan_sick, school.tan_p1, school.kumar, MONDAY_ODD)
    d = svc.resolve_dashboard(MONDAY_ODD)
    sick = {c.teacher_id for c in d.cards}
    index = svc.build_timetable_index(1, WeekType.ODD)
    covering = {(a.covering_teacher_id, a.period_id) for a in svc.load_assignments(MONDAY_ODD)}
    for card in d.cards:
        for p in card.periods:
            if not isinstance(p, svc.UncoveredSlot):
                continue
            for c in p.candidates:
                assert c.id != card.teacher_id
                assert c.id not in sick
                assert c.id not in index.busy_at(p.slot.period_id)
                assert (c.id, p.slot.period_id) not in covering

def test_overlapping_reports_merge_into_one_card(school):
    db.session.add(SickReport(teacher_id=school.tan, start_date=MONDAY_ODD, end_date=MONDAY_ODD))
    db.session.commit()
    d = svc.resolve_dashboard(MONDAY_ODD)
    tan_cards = [c for c in d.cards if c.teacher_id == school.tan]
    assert len(tan_cards) == 1
    assert tan_cards[0].sick_report_id == school.tan_sick
    assert len(tan_cards[0].sick_report_ids) == 2
    assert d.total_uncovered == 3

def test_permanent_relief_teacher_is_candidate(school):
    d = svc.resolve_dashboard(MONDAY_ODD)
    kumar = next(c for c in _card(d, school.tan).periods[0].candidates if c.name == "Kumar")
    assert kumar.type == TeacherType.PERMANENT_RELIEF

def test_to_dict_shape(school):
    ledger.create_assignment(school.tan_sick, school.tan_p1, school.lim, MONDAY_ODD)
    out = svc.resolve_dashboard(MONDAY_ODD).to_dict()
    assert out["date"] == "2026-01-12"
    assert (out["cards"][0]["covered_count"], out["cards"][0]["uncovered_count"]) == (1, 1)
    assert (out["cards"][1]["covered_count"], out["cards"][1]["uncovered_count"]) == (0, 1)
    assert out["week_type"] == "ODD"
    covered, uncovered = out["cards"][0]["periods"]
    assert covered["is_covered"] is True
    assert covered["covering_teacher_name"] == "Lim"
    assert covered["assignment_id"] is not None
    assert covered["candidates"] == []
    assert covered["start_time"] == "07:30" and covered["end_time"] == "08:20"
    assert uncovered["is_covered"] is False
    assert uncovered["covering_teacher_name"] is None
    assert uncovered["candidates"][0] == {"id": school.kumar, "name": "Kumar", "type": "PERMANENT_RELIEF"}


# ---- чистая функция без БД ----
def test_compute_coverage_pure():
    on = date(2026, 1, 12)
    rows = [
        SlotRow(1, 1, 1, 10, 1, time(8, 0), time(8, 45), WeekType.ALL, "1A", "Art"),
        SlotRow(2, 2, 1, 10, 1, time(8, 0), time(8, 45), WeekType.ALL, "1B", "Art"),
    ]
    index = TimetableIndex(1, WeekType.ODD, rows)
    teachers = [
        svc.TeacherRow(1, "Zed", TeacherType.REGULAR),
        svc.TeacherRow(2, "amy", TeacherType.REGULAR),
        svc.TeacherRow(3, "Bob", TeacherType.REGULAR),
        svc.TeacherRow(4, "Cat", TeacherType.PERMANENT_RELIEF),
    ]
    reports = [
        svc.SickReportRow(7, 1, "Zed", on, on),
        svc.SickReportRow(8, 3, "Bob", date(2026, 1, 1), date(2026, 1, 2)),  # не пересекается
    ]
    assignments = [svc.AssignmentRow(50, 99, 77, 10, 4, "Cat")]  # Cat уже заменяет в этой паре

    d = svc.compute_coverage(on, WeekType.ODD, reports, index, teachers, assignments)
    assert [c.teacher_id for c in d.cards] == [1]
    (outcome,) = d.cards[0].periods
    assert [c.name for c in outcome.candidates] == ["Bob"]
