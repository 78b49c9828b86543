#!/usr/bin/env python
"""Idempotent bootstrap of the first manager account.

Signups start without a role and only a manager can approve them, so a fresh
deployment needs one manager created out of band.

Usage:
    python backend/scripts/seed_manager.py --email boss@example.com --name "Boss" --password secret
    python backend/scripts/seed_manager.py --email existing@example.com   # promote a pending signup
    python backend/scripts/seed_manager.py --email boss@example.com --dry-run
"""
from __future__ import annotations
import os, sys, argparse
from sqlalchemy import select

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from procurement import create_app, get_db  # type: ignore
from procurement.constants.permissions import ROLE_MANAGER
from procurement.models.user import Base, User
import procurement.models.order  # noqa: F401
import procurement.models.comment  # noqa: F401
import procurement.models.order_update  # noqa: F401
import procurement.models.audit  # noqa: F401
from procurement.services.audit import add_audit


def ensure_manager(session, email: str, name: str | None, password: str | None):
    """Return (user, action) where action is created | promoted | unchanged."""
    email = email.strip().lower()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        if not password:
            raise SystemExit('--password is required when creating a new manager')
        user = User(email=email, name=name or email.split('@')[0], password_hash='', role=ROLE_MANAGER)
        user.set_password(password)
        session.add(user)
        session.flush()
        action = 'created'
    elif user.role is None:
        user.role = ROLE_MANAGER
        action = 'promoted'
    elif user.role == ROLE_MANAGER:
        return user, 'unchanged'
    else:
        raise SystemExit(f'{email} is already approved as {user.role}; roles are assigned once')
    add_audit('USER.BOOTSTRAP', entity='User', entity_id=user.id, meta={'role': ROLE_MANAGER, 'action': action}, actor_user_id=0)
    return user, action


def main():
    parser = argparse.ArgumentParser(description='Create or promote the first manager')
    parser.add_argument('--email', required=True)
    parser.add_argument('--name')
    parser.add_argument('--password')
    parser.add_argument('--dry-run', action='store_true', help='Run logic then rollback (no DB changes)')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        session = get_db()
        Base.metadata.create_all(session.get_bind(), checkfirst=True)
        user, action = ensure_manager(session, args.email, args.name, args.password)
        if args.dry_run:
            session.rollback()
            print(f'[dry-run] {args.email}: would be {action}')
            return
        session.commit()
        print(f'{user.email} (id={user.id}): {action}')


if __name__ == '__main__':
    main()
