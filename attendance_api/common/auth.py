# attendance_api/common/auth.py
"""
Access gate.

``requires_auth`` admits any request carrying a valid access token and puts the
decoded identity on ``g.identity``. ``requires_admin`` additionally requires the
admin role. A missing, malformed or expired token is always the same 401; a
known caller without the role gets a 403.
"""
from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from attendance_api.common.errors import AuthenticationError, AuthorizationError
from attendance_api.models.employee import Role
from attendance_api.services.tokens import Identity, identity_from_claims


def _load_identity() -> Optional[Identity]:
    try:
        verify_jwt_in_request()
        return identity_from_claims(get_jwt())
    except Exception:
        return None


def requires_auth(fn):
    @wraps(fn)
    def inner(*args, **kwargs):
        ident = _load_identity()
        if ident is None:
            raise AuthenticationError()
        g.identity = ident
        return fn(*args, **kwargs)
    return inner


def requires_role(role: Role):
    def outer(fn):
        @wraps(fn)
        @requires_auth
        def inner(*args, **kwargs):
            if g.identity.role is not role:
                raise AuthorizationError()
            return fn(*args, **kwargs)
        return inner
    return outer


requires_admin = requires_role(Role.ADMIN)
