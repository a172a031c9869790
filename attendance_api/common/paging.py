# attendance_api/common/paging.py
from flask import request
from sqlalchemy import or_

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def limit_arg(default: int = DEFAULT_LIMIT) -> int:
    try:
        limit = int(request.args.get("limit", default))
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, MAX_LIMIT))


def text_q():
    q = request.args.get("q", "")
    return q.strip() or None


def apply_q_search(query, *cols):
    q = text_q()
    if not q:
        return query
    like = f"%{q.lower()}%"
    return query.filter(or_(*[c.ilike(like) for c in cols]))
