import logging
import os
from datetime import timedelta

import click
from flask import Flask
from flask_cors import CORS

from attendance_api.extensions import db, migrate, jwt, init_db
from attendance_api.common.errors import (
    ConfigurationError,
    register_error_handlers,
    register_jwt_handlers,
)
from attendance_api.models import load_all

DEV_JWT_SECRET = "dev-jwt-secret"
# only these environments may run on the built-in signing key
DEV_ENVS = ("development", "test")


def _load_jwt_secret(app: Flask):
    secret = app.config.get("JWT_SECRET_KEY")
    if secret:
        return
    env = app.config["APP_ENV"]
    if env not in DEV_ENVS and not app.testing:
        raise ConfigurationError(f"JWT_SECRET_KEY must be set (APP_ENV={env})")
    app.logger.warning("JWT_SECRET_KEY not set; using the development key (APP_ENV=%s)", env)
    app.config["JWT_SECRET_KEY"] = DEV_JWT_SECRET


def create_app(config_object: str | None = None, overrides: dict | None = None):
    app = Flask(__name__)

    # Basic inline config (defaults)
    app.config["APP_ENV"] = (os.getenv("APP_ENV") or "production").lower()
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=24)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///attendance.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["PASSWORD_HASH_METHOD"] = os.getenv("PASSWORD_HASH_METHOD", "pbkdf2:sha256:600000")
    app.config["MIN_PASSWORD_LENGTH"] = 3
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").upper()
    app.config["CORS_ORIGINS"] = os.getenv("CORS_ORIGINS", "*")

    if config_object:
        app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"], logging.INFO))
    _load_jwt_secret(app)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Extensions
    init_db(app)
    jwt.init_app(app)
    register_jwt_handlers(jwt)
    register_error_handlers(app)
    migrate.init_app(app, db)

    # Ensure models are loaded so metadata is complete
    with app.app_context():
        load_all()

    # Blueprints
    from attendance_api.blueprints.health import bp as health_bp
    from attendance_api.blueprints.auth import bp as auth_bp
    from attendance_api.blueprints.employees import bp as employees_bp
    from attendance_api.blueprints.attendance_admin import bp as attendance_admin_bp
    from attendance_api.blueprints.audit_logs import bp as audit_logs_bp
    from attendance_api.blueprints.self_service import bp as self_service_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(attendance_admin_bp)
    app.register_blueprint(audit_logs_bp)
    app.register_blueprint(self_service_bp)

    _register_cli(app)
    return app


# ----------------- CLI COMMANDS -----------------

DEMO_EMPLOYEES = (
    ("John Doe", "john.doe@example.com", "IT", "EMP001"),
    ("Jane Smith", "jane.smith@example.com", "HR", "EMP002"),
    ("Bob Wilson", "bob.wilson@example.com", "Finance", "EMP003"),
)


def ensure_employee(email: str, name: str, password: str | None, role: str = "employee",
                    department: str = "General", code: str | None = None):
    """Create the employee or reset its password/role. Returns (employee, created)."""
    from attendance_api.models.employee import Employee

    email = email.strip().lower()
    emp = Employee.query.filter_by(email=email).first()
    created = emp is None
    if created:
        emp = Employee(email=email, name=name, department=department, code=code, is_active=True)
        db.session.add(emp)
    emp.role = role
    emp.is_active = True
    if password:
        emp.set_password(password)
    db.session.commit()
    return emp, created


def _register_cli(app: Flask):

    @app.cli.command("seed-admin")
    @click.option("--email", envvar="ADMIN_EMAIL", required=True, help="Admin login email")
    @click.option("--password", envvar="ADMIN_PASSWORD", prompt=True, hide_input=True,
                  confirmation_prompt=True, help="Admin password (prompted when omitted)")
    @click.option("--name", default="Admin", show_default=True)
    def seed_admin(email: str, password: str, name: str):
        """Create the admin account, or reset its password if it exists."""
        if len(password) < app.config["MIN_PASSWORD_LENGTH"]:
            raise click.BadParameter("password too short", param_hint="--password")
        emp, created = ensure_employee(email, name, password, role="admin", department="Management")
        click.echo(f"Admin {emp.email} {'created' if created else 'updated'}")

    @app.cli.command("seed-demo")
    @click.option("--password", prompt=True, hide_input=True,
                  help="Password given to every demo employee")
    def seed_demo(password: str):
        """Seed three demo employees in different departments."""
        for name, email, dept, code in DEMO_EMPLOYEES:
            emp, created = ensure_employee(email, name, password, department=dept, code=code)
            click.echo(f"{emp.email} ({dept}) {'created' if created else 'existing, password reset'}")

    @app.cli.command("grant-admin")
    @click.argument("email")
    def grant_admin(email):
        """Give the admin role to an existing employee."""
        from attendance_api.models.employee import Employee, Role

        emp = Employee.query.filter_by(email=email.strip().lower()).first()
        if not emp:
            click.echo(f"Employee {email} not found")
            return
        emp.role = Role.ADMIN.value
        db.session.commit()
        click.echo(f"Granted 'admin' to {emp.email}")
