from __future__ import annotations
from typing import List, Tuple
from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from procurement import get_db
from procurement.constants.permissions import ALL_ROLES, permissions_for_role
from procurement.errors import AuthError, ConflictError, NotFoundError
from procurement.models.user import User, RevokedToken, utcnow
from procurement.services.policy import require_manager
from procurement.utils.persistence import commit_or_raise, execute_or_raise
from procurement.utils.validation import require_text, validate_choice

NEXT_STEP_WAITING = 'waiting_approval'
NEXT_STEP_DASHBOARD = 'dashboard'


def _normalize_email(email) -> str:
    return require_text(email, 'email').lower()


def get_user(user_id: int) -> User:
    user = get_db().execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise NotFoundError(description=f'User {user_id} not found')
    return user


def signup(email, password, name) -> User:
    """Register an account awaiting approval (role stays NULL until a manager acts)."""
    email = _normalize_email(email)
    password = require_text(password, 'password')
    name = require_text(name, 'name')
    session = get_db()
    if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
        raise ConflictError(description='Email already registered')
    user = User(email=email, name=name, password_hash='', role=None)
    user.set_password(password)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # lost a race against a concurrent signup with the same email
        session.rollback()
        raise ConflictError(description='Email already registered')
    current_app.logger.info('Signup %s (user %s) awaiting approval', email, user.id)
    return user


def issue_token(user: User) -> str:
    claims = {
        'role': user.role,
        'perms': permissions_for_role(user.role),
        'name': user.name,
    }
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(user.id), additional_claims=claims)


def login(email, password) -> Tuple[User, str]:
    if not email or not password:
        raise AuthError(description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email == str(email).strip().lower())).scalar_one_or_none()
    if not user or not user.verify_password(password):
        raise AuthError(description='invalid credentials')
    user.last_login = utcnow()
    commit_or_raise(session, 'login')
    return user, issue_token(user)


def next_step_for(user: User) -> str:
    return NEXT_STEP_DASHBOARD if user.is_approved else NEXT_STEP_WAITING


def pending_users_query():
    q = get_db().query(User).filter(User.role.is_(None))
    return q.order_by(User.created_at.desc(), User.id.desc())


def list_pending_users() -> List[User]:
    return pending_users_query().all()


def approve_user(acting_manager_id: int, target_user_id: int, role) -> User:
    """Assign ``role`` to a pending user. One-time: approved users are never re-assigned."""
    require_manager(acting_manager_id)
    role = validate_choice(role, ALL_ROLES, 'role')
    session = get_db()
    get_user(target_user_id)
    stmt = (
        update(User)
        .where(User.id == target_user_id, User.role.is_(None))
        .values(role=role)
        .execution_options(synchronize_session=False)
    )
    result = execute_or_raise(session, stmt, 'approval')
    if result.rowcount != 1:
        session.rollback()
        raise ConflictError(description='User already approved')
    commit_or_raise(session, 'approval')
    user = get_user(target_user_id)
    session.refresh(user)
    current_app.logger.info('User %s approved as %s by manager %s', target_user_id, role, acting_manager_id)
    return user


def revoke_token(jti: str, user_id: int):
    session = get_db()
    if session.execute(select(RevokedToken).where(RevokedToken.jti == jti)).scalar_one_or_none():
        return
    session.add(RevokedToken(jti=jti, user_id=user_id))
    commit_or_raise(session, 'logout')


def is_token_revoked(jti: str) -> bool:
    return get_db().execute(select(RevokedToken.id).where(RevokedToken.jti == jti)).first() is not None
