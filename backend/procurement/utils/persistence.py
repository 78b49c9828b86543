from __future__ import annotations
"""Session helpers turning SQLAlchemy failures into PersistenceError.

Callers never retry: the session is rolled back so stored state stays as it
was before the action and the error propagates to the request boundary.
"""
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from procurement.errors import PersistenceError


def commit_or_raise(session, what: str):
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.exception('Commit failed while %s', what)
        raise PersistenceError(description=f'Could not persist {what}')


def execute_or_raise(session, statement, what: str):
    """Run a statement, mapping driver/backend failures the same way as commits."""
    try:
        return session.execute(statement)
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.exception('Statement failed while %s', what)
        raise PersistenceError(description=f'Could not persist {what}')

__all__ = ['commit_or_raise', 'execute_or_raise']
