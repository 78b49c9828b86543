from __future__ import annotations
from flask import Blueprint, request
from procurement import get_db
from procurement.constants.orders import STATUS_LABELS, URGENCY_LABELS
from procurement.decorators.auth import require_permissions
from procurement.decorators.audit import audit_log
from procurement.models.order import Order
from procurement.models.comment import Comment
from procurement.services import orders as order_service
from procurement.services import comments as comment_service
from procurement.services.policy import current_user
from procurement.utils.listing import list_response

orders_bp = Blueprint('orders', __name__)


@orders_bp.get('')
@require_permissions('ORDER.READ')
def list_orders():
    user = current_user()
    q = order_service.orders_query(user, request.args.get('scope'))
    return list_response(q, _order_json)


@orders_bp.post('')
@require_permissions('ORDER.CREATE')
@audit_log('ORDER.CREATE', entity='Order', entity_id_key='id', meta_keys=['cost_center', 'urgency', 'deadline'])
def create_order():
    data = request.json or {}
    user = current_user()
    order = order_service.create_order(
        user.id,
        user.name,
        data.get('materials'),
        data.get('cost_center'),
        data.get('deadline'),
        data.get('urgency'),
    )
    return _order_json(order), 201


@orders_bp.get('/stats')
@require_permissions('ORDER.READ')
def order_stats():
    return order_service.stats_for(current_user())


@orders_bp.get('/<int:order_id>')
@require_permissions('ORDER.READ')
def get_order(order_id: int):
    return _order_json(order_service.get_order_for(current_user(), order_id))


@orders_bp.post('/<int:order_id>/claim')
@require_permissions('ORDER.CLAIM')
@audit_log(
    'ORDER.CLAIM',
    entity='Order',
    entity_id_key='id',
    diff_keys=['responsible_id'],
    pre_fetch=lambda a, kw: _prefetch_order(kw.get('order_id')),
    meta_keys=['responsible_name']
)
def claim_order(order_id: int):
    user = current_user()
    return _order_json(order_service.claim_order(user.id, user.name, order_id))


@orders_bp.post('/<int:order_id>/advance')
@require_permissions('ORDER.ADVANCE')
@audit_log(
    'ORDER.ADVANCE',
    entity='Order',
    entity_id_key='id',
    diff_keys=['status'],
    pre_fetch=lambda a, kw: _prefetch_order(kw.get('order_id')),
    meta_keys=['status']
)
def advance_order(order_id: int):
    user = current_user()
    return _order_json(order_service.advance_order(user.id, user.name, order_id))


@orders_bp.get('/<int:order_id>/comments')
@require_permissions('COMMENT.READ')
def list_comments(order_id: int):
    order_service.get_order_for(current_user(), order_id)
    rows = [_comment_json(c) for c in comment_service.list_comments(order_id)]
    return {'data': rows}


@orders_bp.post('/<int:order_id>/comments')
@require_permissions('COMMENT.CREATE')
@audit_log('COMMENT.ADD', entity='Comment', entity_id_key='id', meta_keys=['order_id'])
def add_comment(order_id: int):
    data = request.json or {}
    user = current_user()
    order_service.get_order_for(user, order_id)
    comment = comment_service.add_comment(order_id, user.id, user.name, data.get('comment'))
    return _comment_json(comment), 201


def _order_json(o: Order):
    nxt = order_service.next_status(o.status)
    return {
        'id': o.id,
        'engineer_id': o.engineer_id,
        'engineer_name': o.engineer_name,
        'materials': o.materials,
        'cost_center': o.cost_center,
        'deadline': o.deadline.isoformat(),
        'urgency': o.urgency,
        'urgency_label': URGENCY_LABELS[o.urgency],
        'status': o.status,
        'status_label': STATUS_LABELS[o.status],
        'status_step': order_service.status_step(o.status),
        'next_status': nxt,
        'next_status_label': STATUS_LABELS[nxt] if nxt else None,
        'responsible_id': o.responsible_id,
        'responsible_name': o.responsible_name,
        'created_at': o.created_at.isoformat() if o.created_at else None,
        'updated_at': o.updated_at.isoformat() if o.updated_at else None,
    }


def _comment_json(c: Comment):
    return {
        'id': c.id,
        'order_id': c.order_id,
        'user_id': c.user_id,
        'user_name': c.user_name,
        'comment': c.comment,
        'created_at': c.created_at.isoformat() if c.created_at else None,
    }


def _prefetch_order(order_id: int):
    o = get_db().get(Order, order_id)
    if not o:
        return {}
    return {'status': o.status, 'responsible_id': o.responsible_id}
