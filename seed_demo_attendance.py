import argparse
import os
import random
from datetime import date, datetime, time, timedelta

from attendance_api import create_app, ensure_employee
from attendance_api.extensions import db
from attendance_api.models.attendance import EventKind
from attendance_api.models.employee import Employee
from attendance_api.services.attendance_engine import build_event

FIRST_NAMES = ["Aarav", "Vivaan", "Aditya", "Diya", "Saanvi", "Ananya", "Kiara", "Riya", "Arjun", "Ishaan"]
LAST_NAMES = ["Sharma", "Verma", "Gupta", "Mehta", "Singh", "Kumar", "Patel", "Reddy", "Nair", "Rao"]
DEPARTMENTS = ["IT", "HR", "Finance", "Sales"]


def seed_employees(count, password):
    existing = Employee.query.filter(Employee.code.like("DEMO-%")).count()
    to_create = max(0, count - existing)
    print(f"Existing demo employees: {existing}. Creating {to_create} more...")
    for i in range(to_create):
        fn = random.choice(FIRST_NAMES)
        ln = random.choice(LAST_NAMES)
        code = f"DEMO-{existing + i + 1:04d}"
        ensure_employee(f"{fn.lower()}.{ln.lower()}.{code.lower()}@example.com", f"{fn} {ln}", password,
                        department=random.choice(DEPARTMENTS), code=code)
    return Employee.query.filter(Employee.code.like("DEMO-%"), Employee.is_active.is_(True)).all()


def _at(d, hh, mm, jitter):
    return datetime.combine(d, time(hh, mm)) + timedelta(minutes=random.randint(-jitter, jitter))


def generate_days(employees, start_date, end_date):
    """Full timer days for most employees, admin marks for the rest; weekends skipped."""
    print(f"Generating attendance from {start_date} to {end_date}...")
    count = 0
    d = start_date
    while d <= end_date:
        if d.weekday() < 5:
            for emp in employees:
                r = random.random()
                if r < 0.85:
                    plan = [
                        (EventKind.CHECK_IN, _at(d, 9, 0, 30)),
                        (EventKind.LUNCH_OUT, _at(d, 13, 0, 10)),
                        (EventKind.LUNCH_IN, _at(d, 13, 45, 10)),
                        (EventKind.CHECK_OUT, _at(d, 18, 0, 30)),
                    ]
                elif r < 0.92:
                    plan = [(EventKind.ABSENT, _at(d, 10, 0, 0))]
                elif r < 0.97:
                    plan = [(EventKind.LEAVE, _at(d, 10, 0, 0))]
                else:
                    plan = [(EventKind.HALF_DAY, _at(d, 10, 0, 0))]
                for kind, ts in plan:
                    db.session.add(build_event(emp.id, d, kind, actor="seed", now=ts))
                    count += 1
        if count > 1000:
            db.session.commit()
            count = 0
        d += timedelta(days=1)
    db.session.commit()
    print("Attendance generated.")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--start-date", default=(date.today() - timedelta(days=30)).isoformat())
    parser.add_argument("--end-date", default=date.today().isoformat())
    parser.add_argument("--employees", type=int, default=20)
    parser.add_argument("--password", default=os.getenv("DEMO_PASSWORD"),
                        help="Password for created demo accounts (or DEMO_PASSWORD)")
    args = parser.parse_args()
    if not args.password:
        parser.error("--password or DEMO_PASSWORD is required")

    app = create_app()
    with app.app_context():
        emps = seed_employees(args.employees, args.password)
        s_date = datetime.strptime(args.start_date, "%Y-%m-%d").date()
        e_date = datetime.strptime(args.end_date, "%Y-%m-%d").date()
        generate_days(emps, s_date, e_date)


if __name__ == "__main__":
    main()
