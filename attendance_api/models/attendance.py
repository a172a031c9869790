# attendance_api/models/attendance.py
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from attendance_api.extensions import db
from attendance_api.models.employee import utcnow


class EventKind(str, enum.Enum):
    # timer-like kinds, recorded by the employee through the day
    CHECK_IN = "check-in"
    LUNCH_OUT = "lunch-out"
    LUNCH_IN = "lunch-in"
    CHECK_OUT = "check-out"
    # direct statuses, marked by an administrator
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    HALF_DAY = "half-day"


# kind -> timestamp column populated when that kind is recorded
TIME_SLOTS = {
    EventKind.CHECK_IN: "check_in_time",
    EventKind.LUNCH_OUT: "lunch_out_time",
    EventKind.LUNCH_IN: "lunch_in_time",
    EventKind.CHECK_OUT: "check_out_time",
}


class AttendanceEvent(db.Model):
    """
    One immutable attendance fact for an employee on a calendar date.

    Rows are appended, never updated: checking in twice on the same day stores
    two rows. The per-day picture is rebuilt on read by folding the rows in
    ``marked_at`` order (see services.attendance_engine.consolidate).

    status holds the stored label:
      check-in / lunch-out / lunch-in -> the kind itself
      check-out                       -> 'present' (a finished day reads as present)
      present / absent / leave / half-day -> the kind itself
    """

    __tablename__ = "attendance_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"), index=True, nullable=False
    )
    work_date: Mapped[date] = mapped_column(db.Date, index=True, nullable=False)

    kind: Mapped[str] = mapped_column(db.String(16), nullable=False)
    status: Mapped[str] = mapped_column(db.String(16), index=True, nullable=False, default="absent")

    check_in_time: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    lunch_out_time: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    lunch_in_time: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    remarks: Mapped[str] = mapped_column(db.String(500), nullable=False, default="")
    marked_by: Mapped[str] = mapped_column(db.String(255), nullable=False, default="system")
    marked_at: Mapped[datetime] = mapped_column(index=True, nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    employee = relationship("Employee", lazy="joined")

    __table_args__ = (
        Index("ix_attendance_employee_date", "employee_id", "work_date"),
        Index("ix_attendance_date_status", "work_date", "status"),
    )

    def to_dict(self, with_employee: bool = True) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat() if self.work_date else None,
            "kind": self.kind,
            "status": self.status,
            "check_in_time": _iso(self.check_in_time),
            "lunch_out_time": _iso(self.lunch_out_time),
            "lunch_in_time": _iso(self.lunch_in_time),
            "check_out_time": _iso(self.check_out_time),
            "remarks": self.remarks,
            "marked_by": self.marked_by,
            "marked_at": _iso(self.marked_at),
        }
        if with_employee:
            out["employee"] = self.employee.brief() if self.employee else None
        return out


def _iso(v: Optional[datetime]) -> Optional[str]:
    return v.isoformat() if v else None
