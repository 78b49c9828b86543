from __future__ import annotations
"""Domain error taxonomy.

Each error subclasses the werkzeug HTTPException carrying its status code, so
services can raise them outside a request and the unified error handler in
``procurement.create_app`` still renders one JSON shape for all of them.
"""
from werkzeug.exceptions import (
    BadRequest,
    Unauthorized,
    Forbidden,
    NotFound,
    Conflict,
    ServiceUnavailable,
)


class DomainError:
    """Mixin giving every domain error a stable machine-readable ``code``."""
    code_name = 'ERROR'


class ValidationError(DomainError, BadRequest):
    code_name = 'VALIDATION'


class InvalidTransitionError(DomainError, BadRequest):
    code_name = 'INVALID_TRANSITION'


class AuthError(DomainError, Unauthorized):
    code_name = 'AUTH'


class ForbiddenError(DomainError, Forbidden):
    code_name = 'FORBIDDEN'


class NotFoundError(DomainError, NotFound):
    code_name = 'NOT_FOUND'


class ConflictError(DomainError, Conflict):
    code_name = 'CONFLICT'


class PersistenceError(DomainError, ServiceUnavailable):
    code_name = 'PERSISTENCE'


__all__ = [
    'DomainError', 'ValidationError', 'InvalidTransitionError', 'AuthError',
    'ForbiddenError', 'NotFoundError', 'ConflictError', 'PersistenceError',
]
