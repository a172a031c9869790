# attendance_api/services/audit.py
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from attendance_api.extensions import db
from attendance_api.models.audit_log import (
    ATTENDANCE_ACTIONS,
    AuditAction,
    AuditLogEntry,
    AuditOutcome,
)
from attendance_api.models.employee import utcnow

log = logging.getLogger(__name__)


def log_action(
    action: AuditAction,
    employee_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    outcome: AuditOutcome = AuditOutcome.SUCCESS,
) -> Optional[AuditLogEntry]:
    """
    Append one audit entry in its own commit.

    Best effort: a failed write is rolled back and logged, and None is returned
    so the caller's operation carries on. Call it after the primary change has
    been committed so the rollback cannot undo that change.
    """
    entry = AuditLogEntry(
        employee_id=employee_id,
        action=AuditAction(action).value,
        ip_address=ip_address,
        user_agent=user_agent[:512] if user_agent else None,
        details=details,
        outcome=AuditOutcome(outcome).value,
        timestamp=utcnow(),
    )
    try:
        db.session.add(entry)
        db.session.commit()
        return entry
    except SQLAlchemyError:
        db.session.rollback()
        log.exception("audit write failed action=%s employee=%s", entry.action, employee_id)
        return None


# ---------- queries ----------

def _base():
    return AuditLogEntry.query.order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc())


def recent(limit: int = 100) -> List[AuditLogEntry]:
    return _base().limit(limit).all()


def for_employee(employee_id: int, limit: int = 100) -> List[AuditLogEntry]:
    return _base().filter(AuditLogEntry.employee_id == employee_id).limit(limit).all()


def logins_for_employee(employee_id: int, limit: int = 50) -> List[AuditLogEntry]:
    return (
        _base()
        .filter(
            AuditLogEntry.employee_id == employee_id,
            AuditLogEntry.action.in_([AuditAction.LOGIN.value, AuditAction.LOGOUT.value]),
        )
        .limit(limit)
        .all()
    )


def by_action(
    action: AuditAction,
    start: Optional[date] = None,
    end: Optional[date] = None,
    limit: int = 100,
) -> List[AuditLogEntry]:
    q = _base().filter(AuditLogEntry.action == AuditAction(action).value)
    if start:
        q = q.filter(AuditLogEntry.timestamp >= datetime.combine(start, datetime.min.time()))
    if end:
        q = q.filter(AuditLogEntry.timestamp < datetime.combine(end + timedelta(days=1), datetime.min.time()))
    return q.limit(limit).all()


def attendance_actions_on(day: date) -> List[AuditLogEntry]:
    """Attendance-related entries for one calendar day, oldest first."""
    start = datetime.combine(day, datetime.min.time())
    return (
        AuditLogEntry.query
        .filter(
            AuditLogEntry.action.in_([a.value for a in ATTENDANCE_ACTIONS]),
            AuditLogEntry.timestamp >= start,
            AuditLogEntry.timestamp < start + timedelta(days=1),
        )
        .order_by(AuditLogEntry.timestamp.asc(), AuditLogEntry.id.asc())
        .all()
    )
