from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt
from procurement.constants.permissions import permissions_for_role
from procurement.decorators.audit import audit_log
from procurement.models.user import User
from procurement.services import users as user_service
from procurement.services.policy import current_user

auth_bp = Blueprint('auth', __name__)


def user_json(u: User):
    return {
        'id': u.id,
        'email': u.email,
        'name': u.name,
        'role': u.role,
        'created_at': u.created_at.isoformat() if u.created_at else None,
        'last_login': u.last_login.isoformat() if u.last_login else None,
    }


@auth_bp.post('/signup')
@audit_log('USER.SIGNUP', entity='User', entity_id_key='id', meta_keys=['email'])
def signup():
    data = request.json or {}
    user = user_service.signup(data.get('email'), data.get('password'), data.get('name'))
    return {**user_json(user), 'next_step': user_service.next_step_for(user)}, 201


@auth_bp.post('/login')
def login():
    data = request.json or {}
    user, token = user_service.login(data.get('email'), data.get('password'))
    return {
        'access_token': token,
        'user': user_json(user),
        'next_step': user_service.next_step_for(user),
    }


@auth_bp.post('/logout')
@jwt_required()
def logout():
    claims = get_jwt()
    user_service.revoke_token(claims['jti'], int(claims['sub']))
    return {'status': 'logged_out'}


@auth_bp.get('/me')
@jwt_required()
def me():
    user = current_user()
    # role/perms reflect the stored row; a token issued before approval stays permission-less
    return {
        **user_json(user),
        'perms': permissions_for_role(user.role),
        'next_step': user_service.next_step_for(user),
    }
