from __future__ import annotations

from conftest import csrf

DASH = "/api/v1/dashboard"
ASSIGN = "/api/v1/relief-assignments"


def _post(client, payload):
    return client.post(ASSIGN, json=payload, headers={"X-CSRF-Token": csrf(client)})

def _payload(school, slot, teacher, **extra):
    data = {"sick_report_id": school.tan_sick, "slot_id": slot,
            "covering_teacher_id": teacher, "date": "2026-01-12"}
    data.update(extra)
    return data


def test_dashboard_json(client, school):
    r = client.get(f"{DASH}?date=2026-01-12")
    assert r.status_code == 200
    assert r.headers["Cache-Control"] == "no-store"
    body = r.get_json()
    assert body["week_type"] == "ODD"
    assert body["is_weekend"] is False
    assert body["total_uncovered"] == 3
    assert [c["teacher_name"] for c in body["cards"]] == ["Tan", "Ahmad"]
    tan = body["cards"][0]
    assert tan["uncovered_count"] == 2
    assert [p["class_name"] for p in tan["periods"]] == ["3A", "4A"]

def test_dashboard_weekend(client, school):
    body = client.get(f"{DASH}?date=2026-01-10").get_json()
    assert body["is_weekend"] is True
    assert body["week_type"] is None
    assert body["cards"] == []

def test_dashboard_week_override(client, school):
    body = client.get(f"{DASH}?date=2026-01-12&week_type=even").get_json()
    assert body["week_type"] == "EVEN"
    assert [p["class_name"] for p in body["cards"][0]["periods"]] == ["5A"]

def test_dashboard_bad_args(client, school):
    r = client.get(f"{DASH}?date=12-01-2026")
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["code"] == "BAD_REQUEST"
    assert client.get(f"{DASH}?date=2026-01-12&week_type=ALL").status_code == 400
    assert client.get(f"{DASH}?date=2026-01-12&week_type=weekly").status_code == 400


def test_assignment_lifecycle(client, school):
    r = _post(client, _payload(school, school.tan_p1, school.lim))
    assert r.status_code == 201
    created = r.get_json()
    assert created["covering_teacher_id"] == school.lim

    # та же учительница на ту же пару к другому отсутствующему
    r = _post(client, {"sick_report_id": school.ahmad_sick, "slot_id": school.ahmad_p1,
                       "covering_teacher_id": school.lim, "date": "2026-01-12"})
    assert r.status_code == 409
    err = r.get_json()
    assert err["ok"] is False
    assert err["errors"][0]["code"] == "TEACHER_ALREADY_COVERING"

    listed = client.get(f"{ASSIGN}?date=2026-01-12").get_json()
    assert [a["id"] for a in listed["items"]] == [created["id"]]

    token = csrf(client)
    r = client.delete(f"{ASSIGN}/{created['id']}", headers={"X-CSRF-Token": token})
    assert r.status_code == 200
    assert r.get_json() == {"ok": True}
    r = client.delete(f"{ASSIGN}/{created['id']}", headers={"X-CSRF-Token": token})
    assert r.status_code == 404
    assert r.get_json()["errors"][0]["code"] == "ASSIGNMENT_NOT_FOUND"

def test_dashboard_reflects_assignment(client, school):
    _post(client, _payload(school, school.tan_p1, school.lim))
    body = client.get(f"{DASH}?date=2026-01-12").get_json()
    p1 = body["cards"][0]["periods"][0]
    assert p1["is_covered"] is True
    assert p1["covering_teacher_name"] == "Lim"
    ahmad_p1 = body["cards"][1]["periods"][0]
    assert [c["name"] for c in ahmad_p1["candidates"]] == ["Kumar"]

def test_create_error_statuses(client, school):
    r = _post(client, _payload(school, school.tan_p1, school.wong))
    assert (r.status_code, r.get_json()["errors"][0]["code"]) == (409, "TEACHER_BUSY")
    r = _post(client, _payload(school, school.tan_p2, school.kumar))
    assert (r.status_code, r.get_json()["errors"][0]["code"]) == (422, "SLOT_NOT_IN_WEEK")
    r = _post(client, _payload(school, 9999, school.kumar))
    assert (r.status_code, r.get_json()["errors"][0]["code"]) == (404, "SLOT_NOT_FOUND")

def test_create_with_week_override(client, school):
    r = _post(client, _payload(school, school.tan_p2, school.kumar, week_type="EVEN"))
    assert r.status_code == 201
    r = _post(client, _payload(school, school.tan_p3, school.kumar, week_type="ALL"))
    assert r.status_code == 400

def test_create_validation(client, school):
    r = _post(client, {"slot_id": school.tan_p1, "date": "yesterday"})
    assert r.status_code == 422
    assert r.get_json()["errors"][0]["code"] == "VALIDATION_ERROR"

def test_create_requires_csrf(client, school):
    r = client.post(ASSIGN, json=_payload(school, school.tan_p1, school.lim))
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["code"] == "BAD_REQUEST"


def test_relief_summary_endpoint(client, school):
    _post(client, _payload(school, school.tan_p1, school.lim))
    r = client.get("/api/v1/reports/relief-summary?date=2026-01-12")
    assert r.status_code == 200
    assert r.mimetype == "text/plain"
    assert r.headers["Cache-Control"] == "no-store"
    text = r.get_data(as_text=True)
    assert text.startswith("RELIEF SUMMARY — Monday, 12 January 2026")
    assert "• 07:30–08:20 → 3A Math (replacing Tan)" in text

def test_relief_summary_empty_day(client, school):
    r = client.get("/api/v1/reports/relief-summary?date=2026-01-10")
    assert r.status_code == 200
    assert r.get_data(as_text=True) == ""
