from __future__ import annotations
import os
from importlib import import_module
from flask import Flask
from config import config_map
from extensions import db, migrate, csrf
from sqlalchemy import inspect

def _seed_from_config(app):
    if not app.config.get("SEED_DEMO_DATA"):
        return
    with app.app_context():
        # таблица period может ещё не быть создана (alembic upgrade и т.п.)
        if not inspect(db.engine).has_table("period"):
            return

        from models import Period  # локальный импорт, чтобы избежать циклов
        from blueprints.directory.schemas import PeriodIn
        if Period.query.first():
            return
        for raw in app.config.get("DEFAULT_PERIODS", []):
            p = PeriodIn.model_validate(raw)
            db.session.add(Period(number=p.number, start_time=p.start_time, end_time=p.end_time))
        db.session.commit()

def register_blueprints(app: Flask) -> None:
    # Жёстко импортируем модуль с маршрутами core перед взятием bp
    import_module("blueprints.core.routes")
    from blueprints.core import bp as core_bp, api_bp as core_api_bp
    from blueprints.directory import bp as directory_bp
    from blueprints.relief.routes import api_bp as relief_api_bp
    from blueprints.reports.routes import api_bp as reports_api_bp

    # core без префикса → '/health' в корне
    app.register_blueprint(core_bp)
    app.register_blueprint(core_api_bp, url_prefix="/api/v1")
    app.register_blueprint(directory_bp, url_prefix="/directory")
    app.register_blueprint(relief_api_bp, url_prefix="/api/v1")
    app.register_blueprint(reports_api_bp, url_prefix="/api/v1")

def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # --- ВАЖНО: изоляция БД в тестах ---
    # pytest всегда выставляет переменную окружения PYTEST_CURRENT_TEST.
    # Делаем БД в памяти, чтобы никакие изменения из одного теста не протекали в другой.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    register_blueprints(app)
    _seed_from_config(app)
    return app
