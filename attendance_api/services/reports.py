# attendance_api/services/reports.py
from __future__ import annotations

import csv
import io
from datetime import date
from typing import Dict, List, Optional

from openpyxl import Workbook

from attendance_api.common.errors import ValidationError
from attendance_api.models.attendance import AttendanceEvent
from attendance_api.models.employee import Employee
from attendance_api.services.attendance_engine import STATUS_KINDS_ORDERED, parse_work_date

REPORT_STATUSES = tuple(k.value for k in STATUS_KINDS_ORDERED)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_HEADERS = [
    "Date", "Employee Code", "Name", "Email", "Department",
    "Kind", "Status", "Check In", "Lunch Out", "Lunch In", "Check Out",
    "Remarks", "Marked By", "Marked At",
]


def _range(start, end):
    df = parse_work_date(start, field="start_date") if start else None
    dt = parse_work_date(end, field="end_date") if end else None
    if df and dt and df > dt:
        raise ValidationError("start_date", "start_date must be on or before end_date")
    return df, dt


def count_statuses(records) -> Dict[str, int]:
    counts = {s: 0 for s in REPORT_STATUSES}
    for r in records:
        if r.status in counts:
            counts[r.status] += 1
    return counts


def aggregate(start=None, end=None, employee_id: Optional[int] = None) -> dict:
    """
    Attendance rows in [start, end] (either bound optional), newest date first,
    with a per-status breakdown. Read only.
    """
    df, dt = _range(start, end)

    q = AttendanceEvent.query
    if employee_id is not None:
        q = q.filter(AttendanceEvent.employee_id == employee_id)
    if df:
        q = q.filter(AttendanceEvent.work_date >= df)
    if dt:
        q = q.filter(AttendanceEvent.work_date <= dt)

    records = q.order_by(
        AttendanceEvent.work_date.desc(),
        AttendanceEvent.marked_at.desc(),
        AttendanceEvent.id.desc(),
    ).all()
    return {
        "records": records,
        "counts": count_statuses(records),
        "total": len(records),
        "start_date": df,
        "end_date": dt,
    }


def by_date(day) -> List[AttendanceEvent]:
    d = parse_work_date(day)
    return (
        AttendanceEvent.query
        .filter(AttendanceEvent.work_date == d)
        .order_by(AttendanceEvent.marked_at.desc(), AttendanceEvent.id.desc())
        .all()
    )


def by_employee(employee_id: int) -> List[AttendanceEvent]:
    return (
        AttendanceEvent.query
        .filter(AttendanceEvent.employee_id == employee_id)
        .order_by(AttendanceEvent.work_date.desc(), AttendanceEvent.marked_at.desc())
        .all()
    )


def latest_status_rows(rows) -> Dict[int, AttendanceEvent]:
    """Newest status-bearing row per employee; ``rows`` must be newest first."""
    latest: Dict[int, AttendanceEvent] = {}
    for r in rows:
        if r.status in REPORT_STATUSES:
            latest.setdefault(r.employee_id, r)
    return latest


def dashboard_stats(day: date) -> dict:
    """One status per active employee for ``day``, taken from their latest mark."""
    active_ids = {e.id for e in Employee.query.filter_by(is_active=True).all()}
    rows = [r for r in by_date(day) if r.employee_id in active_ids]
    counts = count_statuses(latest_status_rows(rows).values())
    marked = {r.employee_id for r in rows}
    return {
        "total_employees": len(active_ids),
        "present_today": counts["present"],
        "absent_today": counts["absent"],
        "on_leave_today": counts["leave"],
        "half_day_today": counts["half-day"],
        "not_marked_today": len(active_ids - marked),
    }


# ---------- export ----------

def _export_row(r: AttendanceEvent) -> list:
    emp = r.employee

    def ts(v):
        return v.strftime("%Y-%m-%d %H:%M:%S") if v else None

    return [
        r.work_date.isoformat(),
        emp.code if emp else None,
        emp.name if emp else None,
        emp.email if emp else None,
        emp.department if emp else None,
        r.kind, r.status,
        ts(r.check_in_time), ts(r.lunch_out_time), ts(r.lunch_in_time), ts(r.check_out_time),
        r.remarks, r.marked_by, ts(r.marked_at),
    ]


def export_report(records, counts: Dict[str, int], fmt: str = "xlsx") -> tuple[bytes, str, str]:
    """Render a report as (content, extension, mime type)."""
    if fmt == "csv":
        out = io.StringIO()
        w = csv.writer(out)
        w.writerow(EXPORT_HEADERS)
        for r in records:
            w.writerow(_export_row(r))
        return out.getvalue().encode("utf-8"), "csv", "text/csv"

    if fmt != "xlsx":
        raise ValidationError("format", "format must be xlsx or csv")

    wb = Workbook()
    ws = wb.active
    ws.title = "ATTENDANCE"
    ws.append(EXPORT_HEADERS)
    for r in records:
        ws.append(_export_row(r))

    ws_sum = wb.create_sheet("SUMMARY")
    ws_sum.append(["Status", "Count"])
    for status in REPORT_STATUSES:
        ws_sum.append([status, counts.get(status, 0)])
    ws_sum.append(["total", len(records)])

    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue(), "xlsx", XLSX_MIME
