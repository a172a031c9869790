# attendance_api/blueprints/self_service.py
from flask import Blueprint, g, request

from attendance_api.common.auth import requires_auth
from attendance_api.common.http import ok, client_ip, user_agent
from attendance_api.common.paging import limit_arg
from attendance_api.models.attendance import EventKind
from attendance_api.models.audit_log import AuditAction
from attendance_api.services import audit, reports
from attendance_api.services.attendance_engine import day_status, record_event, today

bp = Blueprint("self_service", __name__, url_prefix="/api/employee")

# kind -> (audit action, stored remark, response message)
_TIMER_ACTIONS = {
    EventKind.CHECK_IN: (AuditAction.CHECK_IN, "Checked in", "Checked in successfully"),
    EventKind.LUNCH_OUT: (AuditAction.LUNCH_OUT, "Went for lunch", "Lunch out recorded successfully"),
    EventKind.LUNCH_IN: (AuditAction.LUNCH_IN, "Back from lunch", "Lunch in recorded successfully"),
    EventKind.CHECK_OUT: (AuditAction.CHECK_OUT, "Checked out", "Checked out successfully"),
}


def _record_own(kind: EventKind):
    action, remark, message = _TIMER_ACTIONS[kind]
    d = today()
    ev = record_event(g.identity.id, d, kind, remarks=remark, actor=g.identity.email)
    audit.log_action(
        action,
        employee_id=g.identity.id,
        ip_address=client_ip(),
        user_agent=user_agent(),
        details={"date": d.isoformat()},
    )
    return ok(ev.to_dict(with_employee=False), 201, message=message)


@bp.get("/my-attendance")
@requires_auth
def my_attendance():
    rows = reports.by_employee(g.identity.id)
    return ok([r.to_dict(with_employee=False) for r in rows], total=len(rows))


@bp.get("/my-stats")
@requires_auth
def my_stats():
    start = request.args.get("start_date") or request.args.get("startDate")
    end = request.args.get("end_date") or request.args.get("endDate")
    rep = reports.aggregate(start, end, employee_id=g.identity.id)
    return ok(
        {"total": rep["total"], **rep["counts"]},
        start_date=rep["start_date"].isoformat() if rep["start_date"] else None,
        end_date=rep["end_date"].isoformat() if rep["end_date"] else None,
    )


@bp.get("/my-logs")
@requires_auth
def my_logs():
    logs = audit.for_employee(g.identity.id, limit_arg(50))
    return ok([x.to_dict() for x in logs], count=len(logs))


@bp.get("/today-status")
@requires_auth
def today_status():
    return ok(day_status(g.identity.id, today()).to_dict())


@bp.post("/checkin")
@requires_auth
def check_in():
    return _record_own(EventKind.CHECK_IN)


@bp.post("/lunchout")
@requires_auth
def lunch_out():
    return _record_own(EventKind.LUNCH_OUT)


@bp.post("/lunchin")
@requires_auth
def lunch_in():
    return _record_own(EventKind.LUNCH_IN)


@bp.post("/checkout")
@requires_auth
def check_out():
    return _record_own(EventKind.CHECK_OUT)
