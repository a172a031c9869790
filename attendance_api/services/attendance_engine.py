# attendance_api/services/attendance_engine.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional

from attendance_api.common.errors import NotFoundError, ValidationError
from attendance_api.extensions import db
from attendance_api.models.attendance import (
    AttendanceEvent,
    EventKind,
    TIME_SLOTS,
)
from attendance_api.models.employee import Employee, utcnow

log = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

ABSENT = "absent"
PRESENT = "present"

# administrative marks, in the order they are offered to clients
STATUS_KINDS_ORDERED = (EventKind.PRESENT, EventKind.ABSENT, EventKind.LEAVE, EventKind.HALF_DAY)


# ---------- parsing ----------

def parse_work_date(raw, field: str = "date") -> date:
    """Accept a date or a strict 'YYYY-MM-DD' string naming a real calendar day."""
    if isinstance(raw, datetime):
        raise ValidationError(field, "Date must be in YYYY-MM-DD format")
    if isinstance(raw, date):
        return raw
    s = str(raw or "").strip()
    if not _DATE_RE.match(s):
        raise ValidationError(field, "Date must be in YYYY-MM-DD format")
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(field, f"{s} is not a valid calendar date") from None


def parse_kind(raw, allowed: Iterable[EventKind] = tuple(EventKind)) -> EventKind:
    allowed = tuple(allowed)
    if isinstance(raw, EventKind):
        kind = raw
    else:
        try:
            kind = EventKind(str(raw or "").strip().lower())
        except ValueError:
            kind = None
    if kind is None or kind not in allowed:
        choices = ", ".join(k.value for k in allowed)
        raise ValidationError("kind", f"Invalid status. Must be one of: {choices}")
    return kind


def today() -> date:
    return utcnow().date()


# ---------- write path ----------

def build_event(
    employee_id: int,
    work_date: date,
    kind: EventKind,
    remarks: str = "",
    actor: str = "system",
    now: Optional[datetime] = None,
) -> AttendanceEvent:
    """Unsaved event row for an already validated kind and date."""
    now = now or utcnow()
    ev = AttendanceEvent(
        employee_id=employee_id,
        work_date=work_date,
        kind=kind.value,
        status=kind.value,
        remarks=(remarks or "").strip(),
        marked_by=actor or "system",
        marked_at=now,
        created_at=now,
    )
    slot = TIME_SLOTS.get(kind)
    if slot:
        setattr(ev, slot, now)
    if kind is EventKind.CHECK_OUT:
        # a completed day always reads back as present
        ev.status = PRESENT
    return ev


def record_event(
    employee_id: int,
    work_date,
    kind,
    remarks: str = "",
    actor: str = "system",
    commit: bool = True,
) -> AttendanceEvent:
    """
    Append one attendance event.

    Raises ValidationError for a malformed date or unknown kind and NotFoundError
    for an unknown employee; nothing is written in either case. Recording the
    same kind twice for a day stores two rows.
    """
    day = parse_work_date(work_date)
    k = parse_kind(kind)

    if db.session.get(Employee, employee_id) is None:
        raise NotFoundError("Employee not found")

    ev = build_event(employee_id, day, k, remarks=remarks, actor=actor)
    db.session.add(ev)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    log.info("attendance %s recorded employee=%s date=%s by=%s", k.value, employee_id, day, actor)
    return ev


def record_status_bulk(records: list, actor: str) -> List[AttendanceEvent]:
    """
    Administrative marks for many (employee, date) pairs in one transaction.

    Every record is validated before anything is written; the first bad record
    aborts the batch with its index in the error field.
    """
    if not isinstance(records, list) or not records:
        raise ValidationError("records", "Records array is required")

    staged = []
    for i, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise ValidationError(f"records[{i}]", "Each record must be an object")
        try:
            emp_id = int(rec.get("employee_id", rec.get("employeeId")))
        except (TypeError, ValueError):
            raise ValidationError(f"records[{i}].employee_id", "employee_id must be integer")
        try:
            day = parse_work_date(rec.get("date"))
            k = parse_kind(rec.get("status"), allowed=STATUS_KINDS_ORDERED)
        except ValidationError as e:
            raise ValidationError(f"records[{i}].{e.field}", e.message)
        staged.append((emp_id, day, k, rec.get("remarks") or ""))

    ids = {emp_id for emp_id, _, _, _ in staged}
    found = {row.id for row in Employee.query.filter(Employee.id.in_(ids)).all()}
    missing = sorted(ids - found)
    if missing:
        raise NotFoundError(f"Employee not found: {', '.join(str(m) for m in missing)}")

    now = utcnow()
    events = [build_event(emp_id, day, k, remarks=rm, actor=actor, now=now) for emp_id, day, k, rm in staged]
    db.session.add_all(events)
    db.session.commit()
    log.info("bulk attendance marked count=%d by=%s", len(events), actor)
    return events


# ---------- read path ----------

@dataclass
class ConsolidatedDayStatus:
    employee_id: Optional[int]
    date: Optional[date]
    check_in_time: Optional[datetime] = None
    lunch_out_time: Optional[datetime] = None
    lunch_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    status: str = ABSENT

    def to_dict(self) -> dict:
        def iso(v):
            return v.isoformat() if v else None
        return {
            "employee_id": self.employee_id,
            "date": iso(self.date),
            "check_in_time": iso(self.check_in_time),
            "lunch_out_time": iso(self.lunch_out_time),
            "lunch_in_time": iso(self.lunch_in_time),
            "check_out_time": iso(self.check_out_time),
            "status": self.status,
        }


def _fold_key(ev: AttendanceEvent):
    return (ev.marked_at or datetime.min, ev.id or 0)


def consolidate(
    events: Iterable[AttendanceEvent],
    employee_id: Optional[int] = None,
    work_date: Optional[date] = None,
) -> ConsolidatedDayStatus:
    """
    Fold one employee's events for one date into a single day view.

    Events are replayed oldest first by ``marked_at`` (ties: row id, then input
    order). A check-in slot marks the day present; lunch and check-out slots only
    fill their timestamp. Administrative status kinds carry no slot and leave the
    folded status alone; their label is read from the stored row by reports.
    Pure: no reads or writes.
    """
    ordered = sorted(events, key=_fold_key)
    if ordered:
        employee_id = employee_id if employee_id is not None else ordered[0].employee_id
        work_date = work_date if work_date is not None else ordered[0].work_date

    day = ConsolidatedDayStatus(employee_id=employee_id, date=work_date)
    for ev in ordered:
        if ev.check_in_time:
            day.check_in_time = ev.check_in_time
            day.status = PRESENT
        if ev.lunch_out_time:
            day.lunch_out_time = ev.lunch_out_time
        if ev.lunch_in_time:
            day.lunch_in_time = ev.lunch_in_time
        if ev.check_out_time:
            day.check_out_time = ev.check_out_time
    return day


def events_for_day(employee_id: int, work_date: date) -> List[AttendanceEvent]:
    return (
        AttendanceEvent.query
        .filter(AttendanceEvent.employee_id == employee_id, AttendanceEvent.work_date == work_date)
        .order_by(AttendanceEvent.marked_at.asc(), AttendanceEvent.id.asc())
        .all()
    )


def day_status(employee_id: int, work_date) -> ConsolidatedDayStatus:
    day = parse_work_date(work_date)
    return consolidate(events_for_day(employee_id, day), employee_id=employee_id, work_date=day)
