from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity
from procurement import get_db
from procurement.models.audit import AuditLog


def _identity_from_token() -> Optional[int]:
    try:
        ident = get_jwt_identity()
    except RuntimeError:
        return None  # outside a verified request (scripts, direct service calls)
    return int(ident) if ident is not None else None


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[Any] = None,
              meta: Optional[Dict[str, Any]] = None, actor_user_id: Optional[int] = None):
    """Stage an audit log entry in the current DB session.

    Parameters:
      action: short action code e.g. ORDER.CREATE, ORDER.CLAIM, USER.APPROVE
      entity: optional entity name (Order, User, Comment)
      entity_id: optional primary key
      meta: additional JSON-safe dictionary (shallow copied)
      actor_user_id: explicit actor; defaults to the JWT identity of the request
    """
    session = get_db()
    if actor_user_id is None:
        actor_user_id = _identity_from_token()
    log = AuditLog(
        actor_user_id=actor_user_id or 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
