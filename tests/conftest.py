import pytest

from attendance_api import create_app
from attendance_api.extensions import db
from attendance_api.models.employee import Employee
from attendance_api.services.tokens import identity_of, issue_token

TEST_PASSWORD = "pw-123"


@pytest.fixture(scope="function")
def app():
    app = create_app(overrides={
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "JWT_SECRET_KEY": "test-secret-key-long-enough-for-hs256",
        # low iteration count keeps the suite fast
        "PASSWORD_HASH_METHOD": "pbkdf2:sha256:1000",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def make_employee(app):
    def _make(email, password=TEST_PASSWORD, role="employee", name=None,
              active=True, department="General", code=None):
        emp = Employee(
            name=name or email.split("@")[0].title(),
            email=email,
            role=role,
            department=department,
            code=code,
            is_active=active,
        )
        if password:
            emp.set_password(password)
        db.session.add(emp)
        db.session.commit()
        return emp
    return _make


@pytest.fixture(scope="function")
def auth_headers(app):
    def _headers(emp):
        return {"Authorization": f"Bearer {issue_token(identity_of(emp))}"}
    return _headers


@pytest.fixture(scope="function")
def admin(make_employee):
    return make_employee("admin@example.com", role="admin", name="Admin", department="Management")


@pytest.fixture(scope="function")
def employee(make_employee):
    return make_employee("john.doe@example.com", name="John Doe", department="IT", code="EMP001")
