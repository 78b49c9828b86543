from __future__ import annotations
from typing import Set
from flask_jwt_extended import get_jwt, get_jwt_identity
from sqlalchemy import select
from procurement.models.user import User
from procurement.models.order import Order
from procurement.constants.permissions import ROLE_MANAGER, ROLE_ENGINEER
from procurement.errors import ForbiddenError, AuthError
from procurement import get_db


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def current_user() -> User:
    """Load the authenticated user's row; token claims alone are never trusted for roles."""
    ident = get_jwt_identity()
    user = get_db().execute(select(User).where(User.id == int(ident))).scalar_one_or_none()
    if not user:
        raise AuthError(description='Account no longer exists')
    return user


def require_role(user_id: int, *roles: str) -> User:
    """Verify against the users table that ``user_id`` holds one of ``roles``.

    Guards engine operations independently of whatever the HTTP layer checked.
    """
    user = get_db().execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user or user.role not in roles:
        raise ForbiddenError(description=f"Requires role: {', '.join(roles)}")
    return user


def require_manager(user_id: int) -> User:
    return require_role(user_id, ROLE_MANAGER)


def require_approved(user_id: int) -> User:
    return require_role(user_id, ROLE_ENGINEER, ROLE_MANAGER)


def can_view_order(user: User, order: Order) -> bool:
    # Managers work the whole queue; engineers only see what they filed
    if user.role == ROLE_MANAGER:
        return True
    return user.role == ROLE_ENGINEER and order.engineer_id == user.id


def assert_can_view_order(user: User, order: Order):
    if not can_view_order(user, order):
        raise ForbiddenError(description='Order belongs to another engineer')
