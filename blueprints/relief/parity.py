# blueprints/relief/parity.py
from __future__ import annotations
from datetime import date
from typing import Optional

from models import WeekType


def iso_week_number(d: date) -> int:
    """ISO-8601: неделя 1 содержит первый четверг года, недели с понедельника."""
    return d.isocalendar()[1]


def week_parity(d: date) -> WeekType:
    return WeekType.ODD if iso_week_number(d) % 2 == 1 else WeekType.EVEN


def effective_week_type(d: date, override: Optional[WeekType] = None) -> WeekType:
    # ручной выбор KP имеет приоритет над календарём
    return override or week_parity(d)


def is_school_day(d: date) -> bool:
    return d.isoweekday() <= 5


def parse_week_type(raw: Optional[str]) -> Optional[WeekType]:
    """'odd'/'EVEN' -> WeekType; пусто -> None. ALL как переопределение не допускается."""
    if raw is None or not str(raw).strip():
        return None
    value = str(raw).strip().upper()
    if value not in (WeekType.ODD.value, WeekType.EVEN.value):
        raise ValueError(f"week_type must be ODD or EVEN, got {raw!r}")
    return WeekType(value)
