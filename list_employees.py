from attendance_api import create_app
from attendance_api.models.employee import Employee

app = create_app()

with app.app_context():
    employees = Employee.query.order_by(Employee.id).all()
    print(f"Found {len(employees)} employees:")
    for emp in employees:
        state = "active" if emp.is_active else "inactive"
        print(f"ID: {emp.id}, Name: {emp.name}, Email: {emp.email}, Role: {emp.role}, Code: {emp.code}, {state}")
