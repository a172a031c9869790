# attendance_api/models/employee.py
from __future__ import annotations

import enum
from datetime import datetime, timezone

from flask import current_app

from attendance_api.extensions import db
from attendance_api.services.credentials import hash_password, verify_credential


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"

    @classmethod
    def parse(cls, raw) -> "Role | None":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return None


class Employee(db.Model):
    __tablename__ = "employees"

    id            = db.Column(db.Integer, primary_key=True)
    name          = db.Column(db.String(255), nullable=False)
    email         = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    role          = db.Column(db.String(16), nullable=False, default=Role.EMPLOYEE.value)
    department    = db.Column(db.String(120), nullable=False, default="General")
    code          = db.Column(db.String(64), unique=True, nullable=True)   # external employee code
    is_active     = db.Column(db.Boolean, nullable=False, default=True)
    created_at    = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at    = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.CheckConstraint("role in ('employee','admin')", name="ck_employee_role"),
    )

    # --- helpers ---
    def set_password(self, raw: str):
        method = current_app.config.get("PASSWORD_HASH_METHOD")
        self.password_hash = hash_password(raw, method=method)

    def check_password(self, raw: str) -> bool:
        return verify_credential(raw, self.password_hash)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "employee_code": self.code,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def brief(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "employee_code": self.code,
            "department": self.department,
        }

    def __repr__(self) -> str:
        return f"<Employee id={self.id} email={self.email!r} role={self.role}>"
