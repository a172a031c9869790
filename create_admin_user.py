import os
import sys

from attendance_api import create_app, ensure_employee

email = os.getenv("ADMIN_EMAIL")
password = os.getenv("ADMIN_PASSWORD")
if not email or not password:
    sys.exit("Set ADMIN_EMAIL and ADMIN_PASSWORD to bootstrap the admin account.")

app = create_app()

with app.app_context():
    emp, created = ensure_employee(email, os.getenv("ADMIN_NAME", "Admin"), password,
                                   role="admin", department="Management")
    print(f"Admin {emp.email} {'created' if created else 'already existed; password reset'}.")
