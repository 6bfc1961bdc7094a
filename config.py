from __future__ import annotations
import os
from pathlib import Path

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    # SQLite file in project directory
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'app.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    SCHOOL_TZ = os.getenv("SCHOOL_TZ", "Asia/Singapore")
    SICK_REPORT_MAX_DAYS = 14

    # токены CSRF живут всю сессию, заголовок X-CSRF-Token
    WTF_CSRF_TIME_LIMIT = None
    WTF_CSRF_HEADERS = ["X-CSRF-Token", "X-CSRFToken"]

class DevConfig(BaseConfig):
    DEBUG = True
    SEED_DEMO_DATA = True
    DEFAULT_PERIODS = [
        {"number": 1, "start_time": "07:30", "end_time": "08:20"},
        {"number": 2, "start_time": "08:20", "end_time": "09:10"},
        {"number": 3, "start_time": "09:30", "end_time": "10:20"},
        {"number": 4, "start_time": "10:20", "end_time": "11:10"},
        {"number": 5, "start_time": "11:30", "end_time": "12:20"},
        {"number": 6, "start_time": "12:20", "end_time": "13:10"},
        {"number": 7, "start_time": "14:00", "end_time": "14:50"},
    ]

class ProdConfig(BaseConfig):
    DEBUG = False
    SEED_DEMO_DATA = False
    DEFAULT_PERIODS = []

config_map = {
    "dev": DevConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}
