# attendance_api/blueprints/attendance_admin.py
from __future__ import annotations

from io import BytesIO

from flask import Blueprint, g, request, send_file

from attendance_api.common.auth import requires_admin
from attendance_api.common.errors import ValidationError
from attendance_api.common.http import ok, json_body, client_ip, user_agent
from attendance_api.models.audit_log import AuditAction
from attendance_api.services import audit, reports
from attendance_api.services.attendance_engine import (
    STATUS_KINDS_ORDERED,
    parse_kind,
    parse_work_date,
    record_event,
    record_status_bulk,
    today,
)

bp = Blueprint("attendance_admin", __name__, url_prefix="/api/admin")


def _as_int(val, field):
    if val in (None, "", "null"):
        raise ValidationError(field, f"{field} is required")
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ValidationError(field, f"{field} must be integer") from None


def _report_args():
    start = request.args.get("start_date") or request.args.get("startDate") or request.args.get("from")
    end = request.args.get("end_date") or request.args.get("endDate") or request.args.get("to")
    emp = request.args.get("employee_id") or request.args.get("employeeId")
    emp_id = _as_int(emp, "employee_id") if emp else None
    return start, end, emp_id


# ---------- marking ----------

@bp.post("/attendance")
@requires_admin
def mark_attendance():
    """
    POST /api/admin/attendance
    JSON: { "employee_id": 1, "date": "2024-01-10", "status": "absent", "remarks": "sick" }
    status: present | absent | leave | half-day
    """
    j = json_body()
    emp_raw = j.get("employee_id", j.get("employeeId"))
    if emp_raw in (None, "") or not j.get("date") or not j.get("status"):
        raise ValidationError("employee_id", "Employee ID, date, and status are required")
    emp_id = _as_int(emp_raw, "employee_id")
    kind = parse_kind(j.get("status"), allowed=STATUS_KINDS_ORDERED)
    remarks = j.get("remarks") or ""

    ev = record_event(emp_id, j.get("date"), kind, remarks=remarks, actor=g.identity.email)

    audit.log_action(
        AuditAction.ATTENDANCE_MARK,
        employee_id=emp_id,
        ip_address=client_ip(),
        user_agent=user_agent(),
        details={
            "date": ev.work_date.isoformat(),
            "status": ev.status,
            "remarks": ev.remarks,
            "marked_by": g.identity.email,
        },
    )
    return ok(ev.to_dict(), 201, message="Attendance marked successfully")


@bp.post("/attendance/bulk")
@requires_admin
def mark_attendance_bulk():
    """JSON: { "records": [ { "employee_id", "date", "status", "remarks" }, ... ] }"""
    events = record_status_bulk(json_body().get("records"), actor=g.identity.email)
    audit.log_action(
        AuditAction.ATTENDANCE_MARK,
        employee_id=None,
        ip_address=client_ip(),
        user_agent=user_agent(),
        details={"record_count": len(events), "marked_by": g.identity.email},
    )
    return ok([e.to_dict(with_employee=False) for e in events], 201,
              message="Bulk attendance marked successfully", count=len(events))


# ---------- reading ----------

@bp.get("/attendance/date/<day>")
@requires_admin
def attendance_by_date(day: str):
    d = parse_work_date(day)
    rows = reports.by_date(d)
    return ok([r.to_dict() for r in rows], date=d.isoformat(), total=len(rows))


@bp.get("/attendance/employee/<int:emp_id>")
@requires_admin
def attendance_by_employee(emp_id: int):
    rows = reports.by_employee(emp_id)
    return ok([r.to_dict(with_employee=False) for r in rows], employee_id=emp_id, total=len(rows))


@bp.get("/attendance/report")
@requires_admin
def attendance_report():
    """GET /api/admin/attendance/report?start_date=&end_date=&employee_id="""
    start, end, emp_id = _report_args()
    rep = reports.aggregate(start, end, employee_id=emp_id)
    return ok({
        "records": [r.to_dict() for r in rep["records"]],
        "counts": rep["counts"],
        "total": rep["total"],
        "start_date": rep["start_date"].isoformat() if rep["start_date"] else None,
        "end_date": rep["end_date"].isoformat() if rep["end_date"] else None,
    })


@bp.get("/attendance/report/export")
@requires_admin
def attendance_report_export():
    """Same filters as /attendance/report plus format=xlsx|csv."""
    fmt = (request.args.get("format") or "xlsx").lower()
    start, end, emp_id = _report_args()
    rep = reports.aggregate(start, end, employee_id=emp_id)
    content, ext, mime = reports.export_report(rep["records"], rep["counts"], fmt)

    span = "_".join(d.isoformat() for d in (rep["start_date"], rep["end_date"]) if d) or "all"
    return send_file(BytesIO(content), mimetype=mime, as_attachment=True,
                     download_name=f"attendance_report_{span}.{ext}")


@bp.get("/dashboard/stats")
@requires_admin
def dashboard_stats():
    d = today()
    return ok(reports.dashboard_stats(d), date=d.isoformat())
