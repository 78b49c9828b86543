from flask import Blueprint, request
from procurement import get_db
from procurement.decorators.auth import require_permissions
from procurement.decorators.audit import audit_log
from procurement.models.user import User
from procurement.routes.auth import user_json
from procurement.services import users as user_service
from procurement.services.policy import current_user
from procurement.utils.listing import list_response

users_bp = Blueprint('users', __name__)


@users_bp.get('/pending')
@require_permissions('USER.APPROVE')
def list_pending():
    return list_response(user_service.pending_users_query(), user_json)


@users_bp.post('/<int:user_id>/approve')
@require_permissions('USER.APPROVE')
@audit_log(
    'USER.APPROVE',
    entity='User',
    entity_id_key='id',
    diff_keys=['role'],
    pre_fetch=lambda a, kw: _prefetch_user(kw.get('user_id')),
    meta_keys=['role'],
)
def approve(user_id: int):
    data = request.json or {}
    actor = current_user()
    user = user_service.approve_user(actor.id, user_id, data.get('role'))
    return user_json(user)


def _prefetch_user(user_id: int):
    u = get_db().get(User, user_id)
    if not u:
        return {}
    return {'role': u.role}
