from __future__ import annotations
"""Audit logging decorator for mutating route handlers.

Usage examples:

@audit_log('ORDER.CREATE', entity='Order', entity_id_key='id', meta_keys=['cost_center', 'urgency'])
def create_order_view():
    ... return _order_json(order), 201

@audit_log('ORDER.CLAIM', entity='Order', entity_id_key='id', diff_keys=['responsible_id'],
           pre_fetch=lambda a, kw: _prefetch_order(kw.get('order_id')))
def claim_order_view(order_id): ...

Parameters:
  action: required audit action code (e.g. ORDER.CLAIM)
  entity: optional entity label (Order, User, Comment)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: path parameter to use for entity_id when the key is absent.
  meta_keys: keys projected from the returned JSON into the meta dict.
  diff_keys / pre_fetch: snapshot taken before the handler runs; changed keys
    are recorded as meta['changes'] = {key: {'before', 'after'}}.

The entry is written after the handler succeeded, in its own commit. Writing
it is best effort: a failure is rolled back and logged, never surfaced.
"""

from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from procurement.services.audit import add_audit
from procurement import get_db


def _extract_payload(rv: Any):
    """Return the JSON-able dict of a view return value (dict or (dict, status))."""
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def _diff(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    changes = {}
    for k in keys:
        if k in before and k in after and before[k] != after[k]:
            changes[k] = {'before': before[k], 'after': after[k]}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data = _extract_payload(rv)
            if not isinstance(data, dict):
                data = {}
            entity_id = data.get(entity_id_key) if entity_id_key else None
            if entity_id is None and entity_id_arg:
                entity_id = kwargs.get(entity_id_arg)
            meta = {k: data.get(k) for k in (meta_keys or []) if k in data}
            if diff_keys and before:
                changes = _diff(before, data, diff_keys)
                if changes:
                    meta['changes'] = changes
            session = get_db()
            try:
                add_audit(action, entity, entity_id, meta)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                current_app.logger.warning('Audit entry %s for %s %s was not recorded', action, entity, entity_id)
            return rv
        return wrapper
    return outer
