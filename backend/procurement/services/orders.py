from __future__ import annotations
"""Order lifecycle: creation, claim and stage advancement, plus derived views.

Claims and advances are single conditional UPDATE statements, so two managers
racing on the same order cannot both win: the loser matches zero rows and gets
ConflictError. Advancing also appends an OrderStatusUpdate row in a second
commit; that write is best effort and is not wrapped in the same transaction.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from procurement import get_db
from procurement.constants import orders as oc
from procurement.constants.permissions import ROLE_MANAGER
from procurement.errors import ConflictError, InvalidTransitionError, NotFoundError
from procurement.models.order import Order
from procurement.models.order_update import OrderStatusUpdate
from procurement.models.user import User, utcnow
from procurement.services.policy import require_approved, require_manager, assert_can_view_order
from procurement.utils.fsm import TransitionValidator
from procurement.utils.persistence import commit_or_raise, execute_or_raise
from procurement.utils.validation import validate_choice, require_text, parse_iso_date, not_before

ORDER_FSM = TransitionValidator.linear(oc.ORDER_PIPELINE)

SCOPE_ALL = 'all'
SCOPE_AVAILABLE = 'available'
SCOPE_MINE = 'mine'
MANAGER_SCOPES = (SCOPE_ALL, SCOPE_AVAILABLE, SCOPE_MINE)


# ---------- Pure helpers ---------- #

def status_step(status: str) -> int:
    """1-based position of ``status`` in the pipeline (progress bar step)."""
    return oc.ORDER_PIPELINE.index(status) + 1


def next_status(status: str) -> Optional[str]:
    return ORDER_FSM.peek_next(status)


def _status_of(order: Any) -> str:
    return order['status'] if isinstance(order, dict) else order.status


def _responsible_of(order: Any):
    return order.get('responsible_id') if isinstance(order, dict) else order.responsible_id


def compute_stats(orders: Iterable[Any]) -> Dict[str, int]:
    statuses = [_status_of(o) for o in orders]
    return {
        'total': len(statuses),
        'pending': sum(1 for s in statuses if s == oc.STATUS_PENDING),
        'in_progress': sum(1 for s in statuses if s in oc.IN_PROGRESS_STATUSES),
        'delivered': sum(1 for s in statuses if s == oc.STATUS_DELIVERED),
    }


def compute_manager_stats(orders: Iterable[Any], manager_id: int) -> Dict[str, int]:
    orders = list(orders)
    stats = compute_stats(orders)
    stats['my_orders_count'] = sum(
        1 for o in orders
        if _responsible_of(o) == manager_id and _status_of(o) != oc.STATUS_DELIVERED
    )
    return stats


# ---------- Reads ---------- #

def get_order(order_id: int) -> Order:
    order = get_db().execute(select(Order).where(Order.id == order_id)).scalar_one_or_none()
    if not order:
        raise NotFoundError(description=f'Order {order_id} not found')
    return order


def get_order_for(user: User, order_id: int) -> Order:
    order = get_order(order_id)
    assert_can_view_order(user, order)
    return order


def orders_query(user: User, scope: Optional[str] = None):
    """Newest-first query of the orders ``user`` may see.

    Engineers always get their own orders. Managers choose a scope:
    all, available (claimable) or mine (claimed by me and not delivered).
    """
    q = get_db().query(Order)
    if user.role != ROLE_MANAGER:
        q = q.filter(Order.engineer_id == user.id)
    else:
        scope = validate_choice(scope or SCOPE_ALL, MANAGER_SCOPES, 'scope')
        if scope == SCOPE_AVAILABLE:
            q = q.filter(Order.responsible_id.is_(None), Order.status == oc.STATUS_PENDING)
        elif scope == SCOPE_MINE:
            q = q.filter(Order.responsible_id == user.id, Order.status != oc.STATUS_DELIVERED)
    return q.order_by(Order.created_at.desc(), Order.id.desc())


def stats_for(user: User) -> Dict[str, int]:
    orders: List[Order] = orders_query(user).all()
    if user.role == ROLE_MANAGER:
        return compute_manager_stats(orders, user.id)
    return compute_stats(orders)


# ---------- Mutations ---------- #

def create_order(engineer_id: int, engineer_name: str, materials: Any, cost_center: Any, deadline: Any,
                 urgency: Optional[str] = None, today: Optional[date] = None) -> Order:
    require_approved(engineer_id)
    materials = require_text(materials, 'materials')
    cost_center = validate_choice(require_text(cost_center, 'cost_center'), oc.COST_CENTERS, 'cost_center')
    deadline = not_before(parse_iso_date(deadline, 'deadline'), today or date.today(), 'deadline')
    urgency = validate_choice(urgency or oc.DEFAULT_URGENCY, oc.ALL_URGENCIES, 'urgency')
    session = get_db()
    order = Order(
        engineer_id=engineer_id,
        engineer_name=engineer_name,
        materials=materials,
        cost_center=cost_center,
        deadline=deadline,
        urgency=urgency,
        status=oc.STATUS_PENDING,
    )
    session.add(order)
    commit_or_raise(session, 'order')
    current_app.logger.info('Order %s created by engineer %s (%s)', order.id, engineer_id, cost_center)
    return order


def claim_order(manager_id: int, manager_name: str, order_id: int) -> Order:
    require_manager(manager_id)
    session = get_db()
    stmt = (
        update(Order)
        .where(Order.id == order_id, Order.responsible_id.is_(None), Order.status == oc.STATUS_PENDING)
        .values(responsible_id=manager_id, responsible_name=manager_name, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    result = execute_or_raise(session, stmt, 'claim')
    if result.rowcount != 1:
        session.rollback()
        order = get_order(order_id)
        current_app.logger.warning('Claim of order %s by %s rejected (responsible=%s, status=%s)',
                                   order_id, manager_id, order.responsible_id, order.status)
        raise ConflictError(description='Order already claimed or no longer pending')
    commit_or_raise(session, 'claim')
    order = get_order(order_id)
    session.refresh(order)
    current_app.logger.info('Order %s claimed by manager %s', order_id, manager_id)
    return order


def advance_order(manager_id: int, manager_name: str, order_id: int) -> Order:
    require_manager(manager_id)
    session = get_db()
    order = get_order(order_id)
    previous = order.status
    if ORDER_FSM.is_terminal(previous):
        raise InvalidTransitionError(description=f'Order {order_id} is already {previous}')
    if order.responsible_id is None:
        # unclaimed orders stay in the available queue until a manager takes them
        raise ConflictError(description=f'Order {order_id} must be claimed before it can advance')
    target = ORDER_FSM.next_for(previous)
    stmt = (
        update(Order)
        .where(Order.id == order_id, Order.status == previous, Order.responsible_id.isnot(None))
        .values(status=target, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    result = execute_or_raise(session, stmt, 'status change')
    if result.rowcount != 1:
        session.rollback()
        raise ConflictError(description='Order changed concurrently, reload and retry')
    commit_or_raise(session, 'status change')
    session.refresh(order)
    current_app.logger.info('Order %s advanced %s -> %s by manager %s', order_id, previous, target, manager_id)
    _append_status_update(session, order_id, previous, target, manager_id, manager_name)
    return order


def _append_status_update(session, order_id: int, previous: str, new: str, actor_id: int, actor_name: str):
    # Second, independent write: the status change above is already committed.
    try:
        session.add(OrderStatusUpdate(
            order_id=order_id,
            previous_status=previous,
            new_status=new,
            updated_by=actor_id,
            updated_by_name=actor_name,
        ))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        current_app.logger.warning('Status update log for order %s (%s -> %s) was not recorded',
                                   order_id, previous, new)


__all__ = [
    'ORDER_FSM', 'MANAGER_SCOPES', 'status_step', 'next_status', 'compute_stats', 'compute_manager_stats',
    'get_order', 'get_order_for', 'orders_query', 'stats_for', 'create_order', 'claim_order', 'advance_order',
]
