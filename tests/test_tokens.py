from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token

from attendance_api import create_app
from attendance_api.common.errors import ConfigurationError
from attendance_api.models.employee import Role
from attendance_api.services.tokens import Identity, issue_token, validate_token


def _ident(role=Role.EMPLOYEE):
    return Identity(id=7, email="jane@example.com", role=role)


def test_issue_then_validate_roundtrip(app):
    ident = _ident(Role.ADMIN)
    got = validate_token(issue_token(ident))
    assert got == ident
    assert got.is_admin


def test_token_expires_after_24h(app):
    claims = decode_token(issue_token(_ident()))
    assert claims["exp"] - claims["iat"] == 24 * 3600
    assert claims["sub"] == "7"
    assert claims["email"] == "jane@example.com"
    assert claims["role"] == "employee"


def test_expired_token_is_invalid(app):
    token = create_access_token(
        identity="7",
        additional_claims={"email": "jane@example.com", "role": "employee"},
        expires_delta=timedelta(minutes=-10),
    )
    assert validate_token(token) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c", 42])
def test_malformed_tokens_are_invalid(app, token):
    assert validate_token(token) is None


def test_token_signed_with_other_key_is_invalid(app):
    other = create_app(overrides={
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "JWT_SECRET_KEY": "some-other-secret-key-also-long-enough",
    })
    with other.app_context():
        foreign = issue_token(_ident())
    assert validate_token(foreign) is None


def test_refresh_token_is_not_an_access_token(app):
    token = create_refresh_token(
        identity="7", additional_claims={"email": "jane@example.com", "role": "employee"}
    )
    assert validate_token(token) is None


def test_token_without_role_claim_is_invalid(app):
    token = create_access_token(identity="7")
    assert validate_token(token) is None


def test_production_requires_signing_key(monkeypatch):
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        create_app(overrides={
            "APP_ENV": "production",
            "JWT_SECRET_KEY": None,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        })


def test_development_falls_back_to_dev_key(monkeypatch):
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    app = create_app(overrides={
        "APP_ENV": "development",
        "JWT_SECRET_KEY": None,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    })
    assert app.config["JWT_SECRET_KEY"]


def test_unset_environment_is_treated_as_production(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        create_app(overrides={"SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"})


def test_testing_flag_allows_dev_key(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    app = create_app(overrides={"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"})
    assert app.config["APP_ENV"] == "production"
    assert app.config["JWT_SECRET_KEY"]
