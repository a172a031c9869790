import pytest

from attendance_api.extensions import db
from attendance_api.models.employee import Employee

BASE = "/api/admin/employees"


@pytest.fixture
def h(admin, auth_headers):
    return auth_headers(admin)


def test_create_employee(client, h):
    r = client.post(BASE, headers=h, json={
        "name": "Jane Smith",
        "email": "Jane.Smith@Example.com",
        "department": "HR",
        "employee_code": "EMP002",
        "password": "secret-1",
    })
    assert r.status_code == 201
    body = r.get_json()
    assert body["meta"]["message"] == "Employee added successfully"
    data = body["data"]
    assert data["email"] == "jane.smith@example.com"
    assert data["role"] == "employee"
    assert data["employee_code"] == "EMP002"
    assert "password_hash" not in data

    emp = db.session.get(Employee, data["id"])
    assert emp.check_password("secret-1")

    # the new account can log in
    r = client.post("/api/auth/login", json={"email": "jane.smith@example.com", "password": "secret-1"})
    assert r.status_code == 200


def test_create_without_password_cannot_log_in(client, h):
    r = client.post(BASE, headers=h, json={"name": "No Pw", "email": "nopw@example.com"})
    assert r.status_code == 201
    assert r.get_json()["data"]["department"] == "General"
    r = client.post("/api/auth/login", json={"email": "nopw@example.com", "password": "anything"})
    assert r.status_code == 401


@pytest.mark.parametrize("payload, field", [
    ({"email": "a@example.com"}, "name"),
    ({"name": "A"}, "name"),
    ({"name": "A", "email": "not-an-email"}, "email"),
    ({"name": "A", "email": "a@example.com", "role": "owner"}, "role"),
    ({"name": "A", "email": "a@example.com", "password": "ab"}, "password"),
    ({"name": "A", "email": "a@example.com", "role": "admin"}, "password"),
])
def test_create_validation(client, h, payload, field):
    r = client.post(BASE, headers=h, json=payload)
    assert r.status_code == 400
    err = r.get_json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert err["detail"]["field"] == field


def test_duplicate_email_or_code_conflicts(client, h, employee):
    r = client.post(BASE, headers=h, json={"name": "Dup", "email": employee.email})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "CONFLICT"

    r = client.post(BASE, headers=h, json={"name": "Dup", "email": "fresh@example.com", "employee_code": "EMP001"})
    assert r.status_code == 400
    assert r.get_json()["error"]["message"] == "Email or Employee ID already exists"


def test_list_search_and_soft_delete(client, h, employee, make_employee):
    make_employee("mary@example.com", name="Mary Major", department="Finance")

    r = client.get(BASE, headers=h)
    assert r.get_json()["meta"]["total"] == 3

    r = client.get(BASE, headers=h, query_string={"q": "finance"})
    assert [e["email"] for e in r.get_json()["data"]] == ["mary@example.com"]

    r = client.delete(f"{BASE}/{employee.id}", headers=h)
    assert r.status_code == 200
    assert r.get_json()["data"] == {"id": employee.id, "is_active": False}

    emails = [e["email"] for e in client.get(BASE, headers=h).get_json()["data"]]
    assert employee.email not in emails
    # row kept
    assert db.session.get(Employee, employee.id) is not None


def test_get_and_update(client, h, employee):
    r = client.get(f"{BASE}/{employee.id}", headers=h)
    assert r.status_code == 200
    assert r.get_json()["data"]["employee_code"] == "EMP001"

    r = client.put(f"{BASE}/{employee.id}", headers=h, json={
        "department": "Sales",
        "employee_code": "EMP900",
        "password": "new-pass",
    })
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["department"] == "Sales"
    assert data["employee_code"] == "EMP900"
    assert data["name"] == "John Doe"

    r = client.post("/api/auth/login", json={"email": employee.email, "password": "new-pass"})
    assert r.status_code == 200


def test_update_email_conflict(client, h, employee, make_employee):
    other = make_employee("taken@example.com")
    r = client.put(f"{BASE}/{employee.id}", headers=h, json={"email": other.email})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "CONFLICT"


def test_missing_employee_is_404(client, h):
    assert client.get(f"{BASE}/999", headers=h).status_code == 404
    assert client.put(f"{BASE}/999", headers=h, json={"name": "x"}).status_code == 404
    assert client.delete(f"{BASE}/999", headers=h).status_code == 404
