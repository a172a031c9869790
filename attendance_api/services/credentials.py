# attendance_api/services/credentials.py
"""
Password hashing and verification.

Hashes are produced by werkzeug's salted KDFs; the method string carries the
cost factor (e.g. ``pbkdf2:sha256:600000``) so it can be tuned per deployment
through the ``PASSWORD_HASH_METHOD`` setting without invalidating old hashes.
"""
from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

log = logging.getLogger(__name__)

DEFAULT_HASH_METHOD = "pbkdf2:sha256:600000"
SALT_LENGTH = 16


def hash_password(raw: str, method: Optional[str] = None) -> str:
    if not isinstance(raw, str) or not raw:
        raise ValueError("password must be a non-empty string")
    return generate_password_hash(raw, method=method or DEFAULT_HASH_METHOD, salt_length=SALT_LENGTH)


def verify_credential(secret, password_hash: Optional[str]) -> bool:
    """
    True only when ``secret`` matches ``password_hash``.

    Fails closed: a missing hash, a malformed hash, an unsupported method or a
    non-string secret all read as a mismatch.
    """
    if not isinstance(secret, str) or not secret or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, secret)
    except Exception:
        # never include the secret here
        log.warning("password hash comparison failed; treating as mismatch")
        return False
