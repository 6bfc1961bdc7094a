# blueprints/relief/services.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, Iterable, List, Optional

from extensions import db
from models import ReliefAssignment, SickReport, Teacher, TeacherType, WeekType
from .index import SlotRow, TimetableIndex, build_timetable_index
from .parity import effective_week_type, is_school_day

log = logging.getLogger(__name__)


# ===== снимки входных данных =====
@dataclass(frozen=True)
class TeacherRow:
    id: int
    name: str
    type: TeacherType

@dataclass(frozen=True)
class SickReportRow:
    id: int
    teacher_id: int
    teacher_name: str
    start_date: date
    end_date: date

@dataclass(frozen=True)
class AssignmentRow:
    id: int
    sick_report_id: int
    slot_id: int
    period_id: int
    covering_teacher_id: int
    covering_teacher_name: str


# ===== результат =====
@dataclass(frozen=True)
class Candidate:
    id: int
    name: str
    type: TeacherType

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type.value}


def _hhmm(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


@dataclass
class SlotOutcome:
    slot: SlotRow

    is_covered = False

    def to_dict(self) -> Dict[str, Any]:
        s = self.slot
        return {
            "slot_id": s.slot_id,
            "period_id": s.period_id,
            "period_number": s.period_number,
            "start_time": _hhmm(s.start_time),
            "end_time": _hhmm(s.end_time),
            "class_name": s.class_name,
            "subject": s.subject,
            "is_covered": self.is_covered,
            "covering_teacher_id": None,
            "covering_teacher_name": None,
            "assignment_id": None,
            "candidates": [],
        }

@dataclass
class CoveredSlot(SlotOutcome):
    assignment_id: int
    covering_teacher_id: int
    covering_teacher_name: str

    is_covered = True

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out.update(
            covering_teacher_id=self.covering_teacher_id,
            covering_teacher_name=self.covering_teacher_name,
            assignment_id=self.assignment_id,
        )
        return out

@dataclass
class UncoveredSlot(SlotOutcome):
    candidates: List[Candidate]

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["candidates"] = [c.to_dict() for c in self.candidates]
        return out


@dataclass
class Card:
    teacher_id: int
    teacher_name: str
    sick_report_id: int
    sick_report_ids: List[int]
    periods: List[SlotOutcome]

    @property
    def covered_count(self) -> int:
        return sum(1 for p in self.periods if p.is_covered)

    @property
    def uncovered_count(self) -> int:
        return len(self.periods) - self.covered_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "sick_report_id": self.sick_report_id,
            "sick_report_ids": list(self.sick_report_ids),
            "covered_count": self.covered_count,
            "uncovered_count": self.uncovered_count,
            "periods": [p.to_dict() for p in self.periods],
        }

@dataclass
class Dashboard:
    date: date
    is_weekend: bool
    week_type: Optional[WeekType]
    cards: List[Card] = field(default_factory=list)

    @property
    def total_uncovered(self) -> int:
        return sum(c.uncovered_count for c in self.cards)

    @property
    def total_covered(self) -> int:
        return sum(c.covered_count for c in self.cards)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "is_weekend": self.is_weekend,
            "week_type": self.week_type.value if self.week_type else None,
            "cards": [c.to_dict() for c in self.cards],
            "total_uncovered": self.total_uncovered,
            "total_covered": self.total_covered,
        }


def _name_key(t: TeacherRow):
    return (t.name.casefold(), t.name, t.id)


# ===== ядро: чистая функция =====
def compute_coverage(
    on: date,
    week_type: WeekType,
    sick_reports: Iterable[SickReportRow],
    index: TimetableIndex,
    teachers: Iterable[TeacherRow],
    assignments: Iterable[AssignmentRow],
) -> Dashboard:
    """Карточки отсутствующих учителей с закрытыми/открытыми уроками и кандидатами.

    Кандидат на урок в паре p: не сам отсутствующий, не на больничном,
    не ведёт свой урок в p и ещё не заменяет кого-то в p.
    """
    reports = [r for r in sick_reports if r.start_date <= on <= r.end_date]
    all_teachers = sorted(teachers, key=_name_key)
    sick = {r.teacher_id for r in reports}

    by_slot: Dict[int, AssignmentRow] = {}
    covering_at: Dict[int, set] = {}
    for a in assignments:
        by_slot[a.slot_id] = a
        covering_at.setdefault(a.period_id, set()).add(a.covering_teacher_id)

    def candidates_for(period_id: int, absent_id: int) -> List[Candidate]:
        excluded = sick | {absent_id} | index.busy_at(period_id) | covering_at.get(period_id, set())
        return [Candidate(t.id, t.name, t.type) for t in all_teachers if t.id not in excluded]

    # несколько больничных на одного учителя -> одна карточка
    grouped: Dict[int, List[SickReportRow]] = {}
    for r in reports:
        grouped.setdefault(r.teacher_id, []).append(r)

    cards: List[Card] = []
    for teacher_id, teacher_reports in grouped.items():
        slots = index.slots_for(teacher_id)
        if not slots:
            continue
        periods: List[SlotOutcome] = []
        for s in slots:
            a = by_slot.get(s.slot_id)
            if a is not None:
                periods.append(CoveredSlot(
                    slot=s, assignment_id=a.id,
                    covering_teacher_id=a.covering_teacher_id,
                    covering_teacher_name=a.covering_teacher_name,
                ))
            else:
                periods.append(UncoveredSlot(slot=s, candidates=candidates_for(s.period_id, teacher_id)))
        first = teacher_reports[0]
        cards.append(Card(
            teacher_id=teacher_id,
            teacher_name=first.teacher_name,
            sick_report_id=first.id,
            sick_report_ids=[r.id for r in teacher_reports],
            periods=periods,
        ))

    return Dashboard(date=on, is_weekend=False, week_type=week_type, cards=cards)


# ===== загрузка из БД =====
def load_sick_reports(on: date) -> List[SickReportRow]:
    rows = (db.session.query(SickReport, Teacher)
            .join(Teacher, Teacher.id == SickReport.teacher_id)
            .filter(SickReport.start_date <= on, SickReport.end_date >= on)
            .order_by(SickReport.start_date.asc(), SickReport.id.asc())
            .all())
    return [SickReportRow(sr.id, t.id, t.name, sr.start_date, sr.end_date) for sr, t in rows]

def load_teachers() -> List[TeacherRow]:
    return [TeacherRow(t.id, t.name, t.type)
            for t in Teacher.query.order_by(Teacher.name.asc(), Teacher.id.asc()).all()]

def load_assignments(on: date) -> List[AssignmentRow]:
    rows = (db.session.query(ReliefAssignment, Teacher)
            .join(Teacher, Teacher.id == ReliefAssignment.covering_teacher_id)
            .filter(ReliefAssignment.date == on)
            .order_by(ReliefAssignment.id.asc())
            .all())
    return [AssignmentRow(a.id, a.sick_report_id, a.timetable_slot_id, a.period_id, t.id, t.name)
            for a, t in rows]


def resolve_dashboard(on: date, week_type_override: Optional[WeekType] = None) -> Dashboard:
    if not is_school_day(on):
        return Dashboard(date=on, is_weekend=True, week_type=None)

    week_type = effective_week_type(on, week_type_override)
    sick_reports = load_sick_reports(on)
    index = build_timetable_index(on.isoweekday(), week_type)
    teachers = load_teachers()
    assignments = load_assignments(on)

    dashboard = compute_coverage(on, week_type, sick_reports, index, teachers, assignments)
    log.info(
        "dashboard resolved",
        extra={"event": "dashboard_resolved", "date": on.isoformat(), "week_type": week_type.value,
               "cards": len(dashboard.cards), "uncovered": dashboard.total_uncovered,
               "covered": dashboard.total_covered},
    )
    return dashboard
