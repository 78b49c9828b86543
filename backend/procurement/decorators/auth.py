from functools import wraps
from flask import current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from procurement.errors import ForbiddenError
from procurement.services.policy import current_permissions


def require_permissions(*codes: str):
    """Reject the request unless the token carries every code in ``codes``.

    Only the claims are checked here; services re-verify the stored role.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            missing = [c for c in codes if c not in current_permissions()]
            if missing:
                current_app.logger.info('User %s denied %s (missing %s)',
                                        get_jwt_identity(), fn.__name__, ', '.join(missing))
                raise ForbiddenError(description=f"Missing permission: {', '.join(missing)}")
            return fn(*args, **kwargs)
        return wrapper
    return outer
