# attendance_api/services/tokens.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from flask_jwt_extended import create_access_token, decode_token

from attendance_api.models.employee import Role

TOKEN_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class Identity:
    id: int
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def identity_of(employee) -> Identity:
    return Identity(id=employee.id, email=employee.email, role=Role(employee.role))


def issue_token(identity: Identity) -> str:
    """Signed access token carrying id, email and role; expires 24h from now."""
    return create_access_token(
        identity=str(identity.id),
        additional_claims={"email": identity.email, "role": identity.role.value},
        expires_delta=TOKEN_TTL,
    )


def identity_from_claims(claims: dict) -> Optional[Identity]:
    try:
        role = Role(claims["role"])
        return Identity(id=int(claims["sub"]), email=str(claims["email"]), role=role)
    except (KeyError, TypeError, ValueError):
        return None


def validate_token(token: Optional[str]) -> Optional[Identity]:
    """
    Decoded identity for a good token, otherwise None.

    Missing, malformed, badly signed, expired and refresh tokens are all the same
    None; callers cannot tell the causes apart.
    """
    if not token or not isinstance(token, str):
        return None
    try:
        claims = decode_token(token)
    except Exception:
        return None
    if claims.get("type") != "access":
        return None
    return identity_from_claims(claims)
