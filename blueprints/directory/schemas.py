from __future__ import annotations
from datetime import date, time
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from models import TeacherType, WeekType
from .validators import ensure_date_range, ensure_period_range

# ---------- Teachers ----------
class TeacherIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: TeacherType = TeacherType.REGULAR

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v

class TeacherOut(TeacherIn):
    id: int

# ---------- Periods ----------
class PeriodIn(BaseModel):
    number: int = Field(ge=1)
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def check_range(self):
        ensure_period_range(self.start_time, self.end_time)
        return self

class PeriodOut(PeriodIn):
    id: int

# ---------- Timetable slots ----------
class TimetableSlotIn(BaseModel):
    teacher_id: int
    day_of_week: int = Field(ge=1, le=5)
    period_id: int
    week_type: WeekType = WeekType.ALL
    class_name: str = Field(min_length=1, max_length=50)
    subject: str = Field(min_length=1, max_length=120)

    @field_validator("class_name", "subject")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

class TimetableSlotOut(TimetableSlotIn):
    id: int
    period_number: int

# ---------- Sick reports ----------
class SickReportIn(BaseModel):
    teacher_id: int
    start_date: date
    end_date: Optional[date] = None
    number_of_days: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_span(self):
        if self.end_date is None and self.number_of_days is None:
            raise ValueError("end_date or number_of_days is required")
        if self.end_date is not None:
            ensure_date_range(self.start_date, self.end_date)
        return self

class SickReportOut(BaseModel):
    id: int
    teacher_id: int
    teacher_name: str
    start_date: date
    end_date: date
