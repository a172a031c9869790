import csv
import io

import pytest

from attendance_api.extensions import db
from attendance_api.models.attendance import AttendanceEvent
from attendance_api.models.audit_log import AuditLogEntry
from attendance_api.services.attendance_engine import today


@pytest.fixture
def h(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def eh(employee, auth_headers):
    return auth_headers(employee)


# ---------- self service ----------

def test_timer_day_through_the_api(client, employee, eh):
    d = today().isoformat()
    for path, msg in (
        ("checkin", "Checked in successfully"),
        ("lunchout", "Lunch out recorded successfully"),
        ("lunchin", "Lunch in recorded successfully"),
        ("checkout", "Checked out successfully"),
    ):
        r = client.post(f"/api/employee/{path}", headers=eh)
        assert r.status_code == 201, path
        assert r.get_json()["meta"]["message"] == msg
        assert r.get_json()["data"]["date"] == d

    status = client.get("/api/employee/today-status", headers=eh).get_json()["data"]
    assert status["status"] == "present"
    assert status["date"] == d
    for slot in ("check_in_time", "lunch_out_time", "lunch_in_time", "check_out_time"):
        assert status[slot] is not None

    actions = [x.action for x in AuditLogEntry.query.filter_by(employee_id=employee.id).order_by(AuditLogEntry.id)]
    assert actions == ["check-in", "lunch-out", "lunch-in", "check-out"]


def test_today_status_before_any_event(client, eh):
    data = client.get("/api/employee/today-status", headers=eh).get_json()["data"]
    assert data["status"] == "absent"
    assert data["check_in_time"] is None


def test_self_service_needs_a_token(client):
    assert client.post("/api/employee/checkin").status_code == 401
    assert AttendanceEvent.query.count() == 0


def test_my_attendance_stats_and_logs(client, employee, eh):
    client.post("/api/employee/checkin", headers=eh)
    client.post("/api/employee/checkout", headers=eh)

    r = client.get("/api/employee/my-attendance", headers=eh)
    assert r.get_json()["meta"]["total"] == 2

    stats = client.get("/api/employee/my-stats", headers=eh).get_json()["data"]
    assert stats["total"] == 2
    assert stats["present"] == 1

    logs = client.get("/api/employee/my-logs", headers=eh).get_json()["data"]
    assert {x["action"] for x in logs} == {"check-in", "check-out"}


# ---------- admin marking ----------

def test_admin_marks_absent_and_reports_it(client, h, employee):
    r = client.post("/api/admin/attendance", headers=h, json={
        "employee_id": employee.id, "date": "2024-01-10", "status": "absent", "remarks": "sick",
    })
    assert r.status_code == 201
    assert r.get_json()["data"]["status"] == "absent"

    entry = AuditLogEntry.query.filter_by(action="attendance-mark").one()
    assert entry.employee_id == employee.id
    assert entry.details["marked_by"] == "admin@example.com"

    rep = client.get("/api/admin/attendance/report", headers=h,
                     query_string={"start_date": "2024-01-10", "end_date": "2024-01-10"}).get_json()["data"]
    assert rep["counts"]["absent"] == 1
    assert rep["total"] == 1
    assert rep["records"][0]["remarks"] == "sick"
    assert rep["records"][0]["employee"]["email"] == employee.email


@pytest.mark.parametrize("payload, field", [
    ({"date": "2024-01-10", "status": "absent"}, "employee_id"),
    ({"employee_id": 1, "date": "10/01/2024", "status": "absent"}, "date"),
    ({"employee_id": 1, "date": "2024-01-10", "status": "bogus"}, "kind"),
    ({"employee_id": 1, "date": "2024-01-10", "status": "check-in"}, "kind"),
    ({"employee_id": "abc", "date": "2024-01-10", "status": "leave"}, "employee_id"),
])
def test_admin_mark_validation(client, h, employee, payload, field):
    r = client.post("/api/admin/attendance", headers=h, json=payload)
    assert r.status_code == 400
    assert r.get_json()["error"]["detail"]["field"] == field
    assert AttendanceEvent.query.count() == 0


def test_admin_mark_unknown_employee(client, h):
    r = client.post("/api/admin/attendance", headers=h,
                    json={"employee_id": 999, "date": "2024-01-10", "status": "leave"})
    assert r.status_code == 404


def test_employee_cannot_mark(client, eh, employee):
    r = client.post("/api/admin/attendance", headers=eh,
                    json={"employee_id": employee.id, "date": "2024-01-10", "status": "present"})
    assert r.status_code == 403
    assert AttendanceEvent.query.count() == 0


def test_bulk_and_lookups(client, h, employee, make_employee):
    other = make_employee("other@example.com")
    r = client.post("/api/admin/attendance/bulk", headers=h, json={"records": [
        {"employee_id": employee.id, "date": "2024-01-10", "status": "present"},
        {"employee_id": other.id, "date": "2024-01-10", "status": "leave"},
        {"employee_id": other.id, "date": "2024-01-11", "status": "half-day"},
    ]})
    assert r.status_code == 201
    assert r.get_json()["meta"]["count"] == 3

    by_day = client.get("/api/admin/attendance/date/2024-01-10", headers=h).get_json()
    assert by_day["meta"]["total"] == 2

    by_emp = client.get(f"/api/admin/attendance/employee/{other.id}", headers=h).get_json()
    assert [x["date"] for x in by_emp["data"]] == ["2024-01-11", "2024-01-10"]

    r = client.get("/api/admin/attendance/date/2024-1-10", headers=h)
    assert r.status_code == 400


def test_report_rejects_inverted_range(client, h):
    r = client.get("/api/admin/attendance/report", headers=h,
                   query_string={"start_date": "2024-02-01", "end_date": "2024-01-01"})
    assert r.status_code == 400


def test_report_csv_export(client, h, employee):
    client.post("/api/admin/attendance", headers=h,
                json={"employee_id": employee.id, "date": "2024-01-10", "status": "leave"})
    r = client.get("/api/admin/attendance/report/export", headers=h,
                   query_string={"format": "csv", "from": "2024-01-01", "to": "2024-01-31"})
    assert r.status_code == 200
    assert r.mimetype == "text/csv"
    assert "attendance_report_2024-01-01_2024-01-31.csv" in r.headers["Content-Disposition"]
    rows = list(csv.reader(io.StringIO(r.get_data(as_text=True))))
    assert len(rows) == 2


def test_dashboard_stats_endpoint(client, h, employee, eh):
    client.post("/api/employee/checkin", headers=eh)
    client.post("/api/employee/checkout", headers=eh)
    data = client.get("/api/admin/dashboard/stats", headers=h).get_json()["data"]
    assert data["total_employees"] == 2
    assert data["present_today"] == 1
    assert data["not_marked_today"] == 1


# ---------- audit log queries ----------

def test_audit_log_endpoints(client, h, employee, eh):
    client.post("/api/auth/login", json={"email": employee.email, "password": "pw-123"})
    client.post("/api/employee/checkin", headers=eh)

    all_logs = client.get("/api/admin/logs", headers=h).get_json()
    assert all_logs["meta"]["count"] == 2

    logins = client.get(f"/api/admin/logs/login/{employee.id}", headers=h).get_json()["data"]
    assert [x["action"] for x in logins] == ["login"]

    by_action = client.get("/api/admin/logs/action/check-in", headers=h).get_json()
    assert by_action["meta"]["action"] == "check-in"
    assert len(by_action["data"]) == 1

    day = today().isoformat()
    att = client.get(f"/api/admin/logs/attendance/{day}", headers=h).get_json()["data"]
    assert [x["action"] for x in att] == ["check-in"]

    filtered = client.get("/api/admin/logs", headers=h, query_string={"action": "login"}).get_json()["data"]
    assert len(filtered) == 1

    assert client.get("/api/admin/logs/action/teleport", headers=h).status_code == 400


def test_check_in_survives_a_failed_audit_write(client, employee, eh):
    db.session.commit()
    AuditLogEntry.__table__.drop(db.engine)

    r = client.post("/api/employee/checkin", headers=eh)
    assert r.status_code == 201
    assert r.get_json()["data"]["kind"] == "check-in"
    assert AttendanceEvent.query.filter_by(employee_id=employee.id, kind="check-in").count() == 1
