from datetime import datetime, time, date
from enum import Enum as PyEnum

from sqlalchemy import (
    Enum, ForeignKey, UniqueConstraint, Index, Date, DateTime, Time,
    Integer, JSON
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from extensions import db

# ---------- Enums ----------
class TeacherType(str, PyEnum):
    REGULAR = "REGULAR"
    PERMANENT_RELIEF = "PERMANENT_RELIEF"  # только замены, своего расписания нет

class WeekType(str, PyEnum):
    ALL = "ALL"
    ODD = "ODD"
    EVEN = "EVEN"


# ---------- Core Entities ----------
class Teacher(db.Model):
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False, index=True)
    type: Mapped[TeacherType] = mapped_column(Enum(TeacherType), nullable=False, default=TeacherType.REGULAR)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    slots = relationship("TimetableSlot", back_populates="teacher", cascade="all, delete-orphan")
    sick_reports = relationship("SickReport", back_populates="teacher", cascade="all, delete-orphan")
    covering_assignments = relationship(
        "ReliefAssignment", back_populates="covering_teacher", cascade="all, delete-orphan",
        foreign_keys="ReliefAssignment.covering_teacher_id",
    )

    def __repr__(self):
        return f"<Teacher {self.name}>"


class Period(db.Model):
    id: Mapped[int] = mapped_column(primary_key=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    slots = relationship("TimetableSlot", back_populates="period", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("number", name="uq_period_number"),
    )

    def __repr__(self):
        return f"<Period {self.number}>"


class TimetableSlot(db.Model):
    __tablename__ = "timetable_slot"

    id: Mapped[int] = mapped_column(primary_key=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teacher.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 1=Mon .. 5=Fri
    period_id: Mapped[int] = mapped_column(ForeignKey("period.id", ondelete="CASCADE"), nullable=False)
    week_type: Mapped[WeekType] = mapped_column(Enum(WeekType), nullable=False, default=WeekType.ALL)
    class_name: Mapped[str] = mapped_column(db.String(50), nullable=False)
    subject: Mapped[str] = mapped_column(db.String(120), nullable=False)

    teacher = relationship("Teacher", back_populates="slots")
    period = relationship("Period", back_populates="slots")
    assignments = relationship("ReliefAssignment", back_populates="timetable_slot", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("teacher_id", "day_of_week", "period_id", "week_type", name="uq_slot_teacher_day_period_week"),
        Index("ix_slot_day_week", "day_of_week", "week_type"),
    )


class SickReport(db.Model):
    __tablename__ = "sick_report"

    id: Mapped[int] = mapped_column(primary_key=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teacher.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)  # включительно
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher", back_populates="sick_reports")
    assignments = relationship("ReliefAssignment", back_populates="sick_report", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_sick_report_range", "start_date", "end_date"),
    )


class ReliefAssignment(db.Model):
    __tablename__ = "relief_assignment"

    id: Mapped[int] = mapped_column(primary_key=True)
    sick_report_id: Mapped[int] = mapped_column(ForeignKey("sick_report.id", ondelete="CASCADE"), nullable=False)
    timetable_slot_id: Mapped[int] = mapped_column(ForeignKey("timetable_slot.id", ondelete="CASCADE"), nullable=False)
    covering_teacher_id: Mapped[int] = mapped_column(ForeignKey("teacher.id", ondelete="CASCADE"), nullable=False)
    # копия slot.period_id: нужна для уникального индекса ниже
    period_id: Mapped[int] = mapped_column(ForeignKey("period.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    sick_report = relationship("SickReport", back_populates="assignments")
    timetable_slot = relationship("TimetableSlot", back_populates="assignments")
    covering_teacher = relationship("Teacher", back_populates="covering_assignments",
                                    foreign_keys=[covering_teacher_id])
    period = relationship("Period")

    __table_args__ = (
        UniqueConstraint("covering_teacher_id", "date", "period_id", name="uq_relief_teacher_date_period"),
        UniqueConstraint("timetable_slot_id", "date", name="uq_relief_slot_date"),
    )


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    action: Mapped[str] = mapped_column(db.String(50), nullable=False)
    entity: Mapped[str] = mapped_column(db.String(50), nullable=False)
    entity_id: Mapped[int | None] = mapped_column(Integer)
    payload: Mapped[dict | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
