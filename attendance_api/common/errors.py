# attendance_api/common/errors.py
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from attendance_api.common.http import fail

# One message for every authentication failure; callers never learn which factor failed.
GENERIC_AUTH_MESSAGE = "Invalid username or password"
ADMIN_REQUIRED_MESSAGE = "Access denied. Admin privileges required."
CONFLICT_MESSAGE = "Email or Employee ID already exists"


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class APIError(Exception):
    """Custom API Error class."""
    def __init__(self, code, message, status_code=400, payload=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.payload = payload


class AuthenticationError(APIError):
    CODE = "AUTH_FAILED"

    def __init__(self):
        super().__init__(self.CODE, GENERIC_AUTH_MESSAGE, 401)


class AuthorizationError(APIError):
    def __init__(self, message=ADMIN_REQUIRED_MESSAGE):
        super().__init__("FORBIDDEN", message, 403)


class ValidationError(APIError):
    def __init__(self, field, message):
        super().__init__("VALIDATION_ERROR", message, 400, payload={"field": field})
        self.field = field


class ConflictError(APIError):
    def __init__(self, message=CONFLICT_MESSAGE):
        super().__init__("CONFLICT", message, 400)


class NotFoundError(APIError):
    def __init__(self, message="Not found"):
        super().__init__("NOT_FOUND", message, 404)


def _auth_failed():
    return fail(GENERIC_AUTH_MESSAGE, status=401, code=AuthenticationError.CODE)


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def _api_error(e: APIError):
        return fail(e.message, status=e.status_code, code=e.code, detail=e.payload)

    @app.errorhandler(IntegrityError)
    def _dup(e: IntegrityError):
        from attendance_api.extensions import db
        db.session.rollback()
        app.logger.warning("integrity error: %s", getattr(e, "orig", e))
        return fail(CONFLICT_MESSAGE, status=400, code="CONFLICT")

    @app.errorhandler(JWTExtendedException)
    def _jwt(e):
        return _auth_failed()

    @app.errorhandler(PyJWTError)
    def _pyjwt(e):
        return _auth_failed()

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        if e.code == 404:
            return fail("Route not found", status=404)
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def _500(e: Exception):
        app.logger.exception(e)
        return fail("Internal server error", status=500)


def register_jwt_handlers(jwt):
    """Collapse every flask-jwt-extended failure into the same 401 response."""

    @jwt.unauthorized_loader
    def _missing(_reason):
        return _auth_failed()

    @jwt.invalid_token_loader
    def _invalid(_reason):
        return _auth_failed()

    @jwt.expired_token_loader
    def _expired(_header, _payload):
        return _auth_failed()

    @jwt.revoked_token_loader
    def _revoked(_header, _payload):
        return _auth_failed()

    @jwt.needs_fresh_token_loader
    def _not_fresh(_header, _payload):
        return _auth_failed()
