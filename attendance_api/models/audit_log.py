# attendance_api/models/audit_log.py
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import ForeignKey, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from attendance_api.extensions import db
from attendance_api.models.employee import utcnow


class AuditAction(str, enum.Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    LUNCH_OUT = "lunch-out"
    LUNCH_IN = "lunch-in"
    ATTENDANCE_MARK = "attendance-mark"
    PROFILE_VIEW = "profile-view"


ATTENDANCE_ACTIONS = (
    AuditAction.CHECK_IN,
    AuditAction.CHECK_OUT,
    AuditAction.LUNCH_OUT,
    AuditAction.LUNCH_IN,
    AuditAction.ATTENDANCE_MARK,
)


class AuditOutcome(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class AuditLogEntry(db.Model):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # NULL when the attempt names an account that does not exist
    employee_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(db.String(32), index=True, nullable=False)
    ip_address: Mapped[Optional[str]] = mapped_column(db.String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(db.String(512), nullable=True)
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        db.JSON().with_variant(JSONB, "postgresql"), nullable=True
    )
    outcome: Mapped[str] = mapped_column(db.String(16), nullable=False, default=AuditOutcome.SUCCESS.value)
    timestamp: Mapped[datetime] = mapped_column(index=True, nullable=False, default=utcnow)

    employee = relationship("Employee", lazy="joined")

    __table_args__ = (
        Index("ix_audit_employee_ts", "employee_id", "timestamp"),
        Index("ix_audit_action_ts", "action", "timestamp"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee": self.employee.brief() if self.employee else None,
            "action": self.action,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "details": self.details,
            "outcome": self.outcome,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
