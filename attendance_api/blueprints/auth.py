# attendance_api/blueprints/auth.py
from flask import Blueprint, current_app, g

from attendance_api.common.auth import requires_auth
from attendance_api.common.errors import AuthenticationError, NotFoundError
from attendance_api.common.http import ok, json_body, client_ip, user_agent
from attendance_api.extensions import db
from attendance_api.models.audit_log import AuditAction, AuditOutcome
from attendance_api.models.employee import Employee
from attendance_api.services import audit
from attendance_api.services.tokens import identity_of, issue_token

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(u: Employee):
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "department": u.department,
        "employee_code": u.code,
    }


def _audit_login(employee_id, outcome, **details):
    audit.log_action(
        AuditAction.LOGIN,
        employee_id=employee_id,
        ip_address=client_ip(),
        user_agent=user_agent(),
        details=details,
        outcome=outcome,
    )


@bp.post("/login")
def login():
    """
    POST /api/auth/login
    JSON: { "email": "...", "password": "..." }   ("username" is accepted for email)

    Every failure (missing field, unknown email, wrong password, inactive
    account) answers the same 401 body; only the audit trail records why.
    """
    data = json_body()
    login_field = (data.get("email") or data.get("username") or "")
    login_field = login_field.strip().lower() if isinstance(login_field, str) else ""
    password = data.get("password") or ""

    if not login_field or not password:
        _audit_login(None, AuditOutcome.FAILURE, email=login_field or None, reason="missing")
        raise AuthenticationError()

    u = Employee.query.filter_by(email=login_field).first()
    if u is None:
        _audit_login(None, AuditOutcome.FAILURE, email=login_field, reason="unknown")
        raise AuthenticationError()

    if not u.check_password(password):
        _audit_login(u.id, AuditOutcome.FAILURE, email=u.email, reason="password")
        raise AuthenticationError()

    if not u.is_active:
        _audit_login(u.id, AuditOutcome.FAILURE, email=u.email, reason="inactive")
        raise AuthenticationError()

    token = issue_token(identity_of(u))
    _audit_login(u.id, AuditOutcome.SUCCESS, email=u.email, role=u.role)
    current_app.logger.info("login ok employee=%s", u.id)
    return ok({"token": token, "user": _user_payload(u)})


@bp.get("/verify")
@requires_auth
def verify():
    u = db.session.get(Employee, g.identity.id)
    if not u or not u.is_active:
        raise AuthenticationError()
    return ok({"user": _user_payload(u)})


@bp.post("/logout")
@requires_auth
def logout():
    # tokens are stateless; the client discards it
    audit.log_action(
        AuditAction.LOGOUT,
        employee_id=g.identity.id,
        ip_address=client_ip(),
        user_agent=user_agent(),
        details={"email": g.identity.email},
    )
    return ok({"message": "Logout successful"})


@bp.get("/me")
@requires_auth
def me():
    u = db.session.get(Employee, g.identity.id)
    if not u:
        raise NotFoundError("User not found")
    audit.log_action(
        AuditAction.PROFILE_VIEW,
        employee_id=u.id,
        ip_address=client_ip(),
        user_agent=user_agent(),
    )
    return ok(_user_payload(u))
