from __future__ import annotations
from typing import Callable, List
from flask import request
from sqlalchemy.orm import Query
from procurement.config.pagination import normalize_pagination


def build_list_payload(rows: List[dict], total: int, limit: int, offset: int) -> dict:
    return {
        'data': rows,
        'pagination': {'total': total, 'limit': limit, 'offset': offset, 'returned': len(rows)},
    }


def list_response(q: Query, to_json: Callable) -> dict:
    """Serialize one page of ``q`` (newest first as ordered by the caller).

    The page is picked from ``?limit=`` and ``?offset=``; total counts the
    whole filtered query.
    """
    limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    total = q.order_by(None).count()
    rows = [to_json(r) for r in q.offset(offset).limit(limit)]
    return build_list_payload(rows, total, limit, offset)
