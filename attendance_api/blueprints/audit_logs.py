# attendance_api/blueprints/audit_logs.py
from flask import Blueprint, request

from attendance_api.common.auth import requires_admin
from attendance_api.common.errors import ValidationError
from attendance_api.common.http import ok
from attendance_api.common.paging import limit_arg
from attendance_api.models.audit_log import AuditAction
from attendance_api.services import audit
from attendance_api.services.attendance_engine import parse_work_date

bp = Blueprint("audit_logs", __name__, url_prefix="/api/admin/logs")


def _action(raw) -> AuditAction:
    try:
        return AuditAction(str(raw or "").strip().lower())
    except ValueError:
        choices = ", ".join(a.value for a in AuditAction)
        raise ValidationError("action", f"action must be one of: {choices}") from None


def _rows(logs, **meta):
    return ok([x.to_dict() for x in logs], count=len(logs), **meta)


@bp.get("")
@requires_admin
def list_logs():
    """GET /api/admin/logs?limit=&action=&employee_id="""
    limit = limit_arg(100)
    emp = request.args.get("employee_id") or request.args.get("employeeId")
    action = request.args.get("action")
    if emp:
        try:
            logs = audit.for_employee(int(emp), limit)
        except ValueError:
            raise ValidationError("employee_id", "employee_id must be integer") from None
    elif action:
        logs = audit.by_action(_action(action), limit=limit)
    else:
        logs = audit.recent(limit)
    return _rows(logs)


@bp.get("/employee/<int:emp_id>")
@requires_admin
def employee_logs(emp_id: int):
    return _rows(audit.for_employee(emp_id, limit_arg(50)), employee_id=emp_id)


@bp.get("/login/<int:emp_id>")
@requires_admin
def login_logs(emp_id: int):
    return _rows(audit.logins_for_employee(emp_id, limit_arg(50)), employee_id=emp_id)


@bp.get("/attendance/<day>")
@requires_admin
def attendance_logs(day: str):
    d = parse_work_date(day)
    return _rows(audit.attendance_actions_on(d), date=d.isoformat())


@bp.get("/action/<action>")
@requires_admin
def action_logs(action: str):
    a = _action(action)
    start = request.args.get("start_date") or request.args.get("startDate")
    end = request.args.get("end_date") or request.args.get("endDate")
    logs = audit.by_action(
        a,
        start=parse_work_date(start, field="start_date") if start else None,
        end=parse_work_date(end, field="end_date") if end else None,
        limit=limit_arg(100),
    )
    return _rows(logs, action=a.value)
