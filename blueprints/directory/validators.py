from __future__ import annotations
from datetime import date, time

def ensure_period_range(start_time: time, end_time: time):
    if end_time <= start_time:
        raise ValueError("end_time must be > start_time")

def ensure_date_range(start_date: date, end_date: date):
    if end_date < start_date:
        raise ValueError("end_date must be >= start_date")
