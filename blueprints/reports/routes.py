# blueprints/reports/routes.py
from __future__ import annotations
from flask import Blueprint, Response

from blueprints.relief.routes import parse_day_args
from blueprints.relief.services import resolve_dashboard
from .services import relief_summary

api_bp = Blueprint("reports_api", __name__)

@api_bp.get("/reports/relief-summary")
def relief_summary_text():
    at, wt = parse_day_args()
    text = relief_summary(resolve_dashboard(at, wt))
    return Response(text, mimetype="text/plain; charset=utf-8", headers={"Cache-Control": "no-store"})
