# attendance_api/blueprints/employees.py
from __future__ import annotations

import re

from flask import Blueprint, current_app, g

from attendance_api.common.auth import requires_admin
from attendance_api.common.errors import ConflictError, NotFoundError, ValidationError
from attendance_api.common.http import ok, json_body
from attendance_api.common.paging import apply_q_search
from attendance_api.extensions import db
from attendance_api.models.employee import Employee, Role

bp = Blueprint("employees", __name__, url_prefix="/api/admin/employees")

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")


# ---------- helpers ----------

def _get_or_404(emp_id: int) -> Employee:
    emp = db.session.get(Employee, emp_id)
    if emp is None:
        raise NotFoundError("Employee not found")
    return emp


def _clean_email(raw) -> str:
    email = (raw or "").strip().lower() if isinstance(raw, str) else ""
    if not _EMAIL_RE.match(email):
        raise ValidationError("email", "Please provide a valid email")
    return email


def _clean_code(raw):
    if raw is None:
        return None
    code = str(raw).strip()
    return code or None


def _check_password(raw) -> str:
    min_len = current_app.config.get("MIN_PASSWORD_LENGTH", 3)
    if not isinstance(raw, str) or len(raw) < min_len:
        raise ValidationError("password", f"Password must be at least {min_len} characters")
    return raw


def _ensure_unique(email=None, code=None, exclude_id=None):
    q = Employee.query
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    if email and q.filter(Employee.email == email).first():
        raise ConflictError("Email already exists")
    if code and q.filter(Employee.code == code).first():
        raise ConflictError()


# ---------- routes ----------

@bp.get("")
@requires_admin
def list_employees():
    """GET /api/admin/employees?q=  (active employees only)"""
    q = Employee.query.filter(Employee.is_active.is_(True))
    q = apply_q_search(q, Employee.name, Employee.email, Employee.department, Employee.code)
    rows = q.order_by(Employee.name.asc(), Employee.id.asc()).all()
    return ok([e.to_dict() for e in rows], total=len(rows))


@bp.get("/<int:emp_id>")
@requires_admin
def get_employee(emp_id: int):
    return ok(_get_or_404(emp_id).to_dict())


@bp.post("")
@requires_admin
def create_employee():
    """
    JSON:
    {
      "name": "Jane Doe",              # required
      "email": "jane@example.com",     # required, unique
      "department": "IT",              # default 'General'
      "employee_code": "EMP001",       # optional, unique
      "role": "employee" | "admin",    # default 'employee'
      "password": "..."                # required for admins; without one the account cannot log in
    }
    """
    j = json_body()
    name = (j.get("name") or "").strip() if isinstance(j.get("name"), str) else ""
    if not name or not j.get("email"):
        raise ValidationError("name", "Name and email are required")
    email = _clean_email(j.get("email"))

    role = Role.parse(j.get("role") or Role.EMPLOYEE.value)
    if role is None:
        raise ValidationError("role", "role must be employee or admin")

    code = _clean_code(j.get("employee_code", j.get("employeeId")))
    password = j.get("password")
    if password is not None or role is Role.ADMIN:
        password = _check_password(password)

    _ensure_unique(email=email, code=code)

    emp = Employee(
        name=name,
        email=email,
        department=(j.get("department") or "General").strip() or "General",
        code=code,
        role=role.value,
        is_active=True,
    )
    if password:
        emp.set_password(password)
    db.session.add(emp)
    db.session.commit()
    current_app.logger.info("employee created id=%s by=%s", emp.id, g.identity.email)
    return ok(emp.to_dict(), 201, message="Employee added successfully")


@bp.put("/<int:emp_id>")
@requires_admin
def update_employee(emp_id: int):
    """Partial update of name, email, department, employee_code, is_active and password."""
    emp = _get_or_404(emp_id)
    j = json_body()

    if j.get("name"):
        emp.name = str(j["name"]).strip()
    if j.get("email"):
        email = _clean_email(j["email"])
        _ensure_unique(email=email, exclude_id=emp.id)
        emp.email = email
    if j.get("department"):
        emp.department = str(j["department"]).strip()
    code = _clean_code(j.get("employee_code", j.get("employeeId")))
    if code:
        _ensure_unique(code=code, exclude_id=emp.id)
        emp.code = code
    if isinstance(j.get("is_active"), bool):
        emp.is_active = j["is_active"]
    if j.get("password"):
        emp.set_password(_check_password(j["password"]))

    db.session.commit()
    return ok(emp.to_dict(), message="Employee updated successfully")


@bp.delete("/<int:emp_id>")
@requires_admin
def delete_employee(emp_id: int):
    """Soft delete: the row stays, is_active flips to false."""
    emp = _get_or_404(emp_id)
    emp.is_active = False
    db.session.commit()
    current_app.logger.info("employee deactivated id=%s by=%s", emp.id, g.identity.email)
    return ok({"id": emp.id, "is_active": False}, message="Employee deleted successfully")
