from flask import Blueprint
from sqlalchemy import text

from attendance_api.common.http import ok, fail
from attendance_api.extensions import db

bp = Blueprint("health", __name__, url_prefix="/api")


@bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
    except Exception:
        db.session.rollback()
        return fail("database unavailable", status=503)
    return ok({"status": "ok"})
