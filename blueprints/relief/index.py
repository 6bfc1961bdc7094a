# blueprints/relief/index.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import time
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from extensions import db
from models import Period, TimetableSlot, WeekType

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotRow:
    """Снимок строки расписания, отвязанный от сессии SQLAlchemy."""
    slot_id: int
    teacher_id: int
    day_of_week: int
    period_id: int
    period_number: int
    start_time: time
    end_time: time
    week_type: WeekType
    class_name: str
    subject: str


class TimetableIndex:
    """Кто что ведёт в конкретный день недели при заданной чётности.

    Строится заново на каждый запрос: расписание может меняться параллельно.
    """

    def __init__(self, day_of_week: int, week_type: WeekType, rows: Iterable[SlotRow]):
        self.day_of_week = day_of_week
        self.week_type = week_type
        picked: Dict[Tuple[int, int], SlotRow] = {}
        for row in rows:
            if row.day_of_week != day_of_week or row.week_type not in (week_type, WeekType.ALL):
                continue
            key = (row.teacher_id, row.period_id)
            prev = picked.get(key)
            if prev is None:
                picked[key] = row
                continue
            # ALL и ODD/EVEN на одну пару: оставляем строку с конкретной чётностью
            log.warning(
                "timetable week type clash",
                extra={"event": "slot_week_type_clash", "teacher_id": row.teacher_id,
                       "period_id": row.period_id, "slot_ids": sorted([prev.slot_id, row.slot_id])},
            )
            if prev.week_type == WeekType.ALL and row.week_type != WeekType.ALL:
                picked[key] = row

        self._by_teacher: Dict[int, List[SlotRow]] = {}
        self._busy_at: Dict[int, Set[int]] = {}
        for row in picked.values():
            self._by_teacher.setdefault(row.teacher_id, []).append(row)
            self._busy_at.setdefault(row.period_id, set()).add(row.teacher_id)
        for slots in self._by_teacher.values():
            slots.sort(key=lambda r: (r.period_number, r.slot_id))

    def slots_for(self, teacher_id: int) -> List[SlotRow]:
        return list(self._by_teacher.get(teacher_id, []))

    def busy_periods(self, teacher_id: int) -> FrozenSet[int]:
        return frozenset(r.period_id for r in self._by_teacher.get(teacher_id, []))

    def busy_at(self, period_id: int) -> FrozenSet[int]:
        return frozenset(self._busy_at.get(period_id, ()))

    def is_busy(self, teacher_id: int, period_id: int) -> bool:
        return teacher_id in self._busy_at.get(period_id, ())

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_teacher.values())


def _row(slot: TimetableSlot, period: Period) -> SlotRow:
    return SlotRow(
        slot_id=slot.id,
        teacher_id=slot.teacher_id,
        day_of_week=slot.day_of_week,
        period_id=period.id,
        period_number=period.number,
        start_time=period.start_time,
        end_time=period.end_time,
        week_type=slot.week_type,
        class_name=slot.class_name,
        subject=slot.subject,
    )


def load_slot_rows(day_of_week: int, week_type: WeekType) -> List[SlotRow]:
    rows = (db.session.query(TimetableSlot, Period)
            .join(Period, Period.id == TimetableSlot.period_id)
            .filter(TimetableSlot.day_of_week == day_of_week,
                    TimetableSlot.week_type.in_([week_type, WeekType.ALL]))
            .order_by(Period.number.asc(), TimetableSlot.id.asc())
            .all())
    return [_row(slot, period) for slot, period in rows]


def build_timetable_index(day_of_week: int, week_type: WeekType) -> TimetableIndex:
    return TimetableIndex(day_of_week, week_type, load_slot_rows(day_of_week, week_type))


def teacher_busy_at(teacher_id: int, day_of_week: int, period_id: int, week_type: WeekType) -> bool:
    """Точечная проверка без построения всего индекса (для записи назначений)."""
    return db.session.query(TimetableSlot.id).filter(
        TimetableSlot.teacher_id == teacher_id,
        TimetableSlot.day_of_week == day_of_week,
        TimetableSlot.period_id == period_id,
        TimetableSlot.week_type.in_([week_type, WeekType.ALL]),
    ).first() is not None
