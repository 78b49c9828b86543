import pytest
from flask import Flask
from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError
from procurement import get_db
from procurement.errors import ConflictError, ForbiddenError, InvalidTransitionError
from procurement.models.order import Order
from procurement.models.order_update import OrderStatusUpdate
from procurement.services import orders as order_service
from tests.test_utils_seed import make_engineer, make_manager, auth_headers, create_order


def _status(order_id):
    return get_db().execute(select(Order.status).where(Order.id == order_id)).scalar_one()


def _updates(order_id):
    rows = get_db().execute(
        select(OrderStatusUpdate).where(OrderStatusUpdate.order_id == order_id).order_by(OrderStatusUpdate.id)
    ).scalars().all()
    return [(r.previous_status, r.new_status) for r in rows]


def test_advance_from_quoting_until_delivered(app_context: Flask):
    client = app_context.test_client()
    mgr = make_manager()
    headers = auth_headers(mgr)
    order = create_order(make_engineer(), status='quoting', responsible=mgr)
    seen = []
    for _ in range(3):
        resp = client.post(f'/orders/{order.id}/advance', headers=headers)
        assert resp.status_code == 200, resp.get_json()
        seen.append(resp.get_json()['status'])
    assert seen == ['purchased', 'shipping', 'delivered']

    resp = client.post(f'/orders/{order.id}/advance', headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['code'] == 'INVALID_TRANSITION'
    assert _status(order.id) == 'delivered'


def test_delivered_order_never_changes(app_context: Flask):
    mgr = make_manager()
    order = create_order(make_engineer(), status='delivered', responsible=mgr)
    for _ in range(2):
        with pytest.raises(InvalidTransitionError):
            order_service.advance_order(mgr.id, mgr.name, order.id)
    assert _status(order.id) == 'delivered'
    assert _updates(order.id) == []


def test_steps_increase_and_each_advance_is_logged(app_context: Flask):
    client = app_context.test_client()
    mgr = make_manager()
    headers = auth_headers(mgr)
    order = create_order(make_engineer())
    client.post(f'/orders/{order.id}/claim', headers=headers)
    steps = [1]
    while True:
        resp = client.post(f'/orders/{order.id}/advance', headers=headers)
        if resp.status_code != 200:
            break
        body = resp.get_json()
        steps.append(body['status_step'])
        assert body['updated_at'] is not None
    assert steps == [1, 2, 3, 4, 5]
    assert _updates(order.id) == [
        ('pending', 'quoting'),
        ('quoting', 'purchased'),
        ('purchased', 'shipping'),
        ('shipping', 'delivered'),
    ]
    row = get_db().execute(select(OrderStatusUpdate).where(OrderStatusUpdate.order_id == order.id)).scalars().first()
    assert row.updated_by == mgr.id
    assert row.updated_by_name == mgr.name


def test_failed_status_log_does_not_undo_advance(app_context: Flask, monkeypatch):
    mgr = make_manager()
    order = create_order(make_engineer(), status='shipping', responsible=mgr)

    def broken_log(**kwargs):
        raise OperationalError('INSERT INTO order_updates', {}, Exception('disk I/O error'))

    monkeypatch.setattr(order_service, 'OrderStatusUpdate', broken_log)
    advanced = order_service.advance_order(mgr.id, mgr.name, order.id)
    assert advanced.status == 'delivered'
    assert _status(order.id) == 'delivered'
    assert _updates(order.id) == []


def test_engineer_cannot_advance(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    order = create_order(eng)
    resp = client.post(f'/orders/{order.id}/advance', headers=auth_headers(eng))
    assert resp.status_code == 403
    with pytest.raises(ForbiddenError):
        order_service.advance_order(eng.id, eng.name, order.id)
    assert _status(order.id) == 'pending'


def test_advance_unknown_order_is_404(app_context: Flask):
    client = app_context.test_client()
    resp = client.post('/orders/876543/advance', headers=auth_headers(make_manager()))
    assert resp.status_code == 404


def test_unclaimed_order_cannot_advance(app_context: Flask):
    client = app_context.test_client()
    owner, other = make_manager('adv-owner'), make_manager('adv-other')
    order = create_order(make_engineer())
    resp = client.post(f'/orders/{order.id}/advance', headers=auth_headers(other))
    assert resp.status_code == 409
    assert resp.get_json()['error']['code'] == 'CONFLICT'
    assert _status(order.id) == 'pending'
    assert _updates(order.id) == []

    # still claimable afterwards, and any manager may advance once it has an owner
    assert client.post(f'/orders/{order.id}/claim', headers=auth_headers(owner)).status_code == 200
    resp = client.post(f'/orders/{order.id}/advance', headers=auth_headers(other))
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'quoting'
    assert resp.get_json()['responsible_id'] == owner.id


def test_ownerless_order_past_pending_cannot_advance(app_context: Flask):
    mgr = make_manager()
    order = create_order(make_engineer(), status='quoting')
    with pytest.raises(ConflictError):
        order_service.advance_order(mgr.id, mgr.name, order.id)
    assert _status(order.id) == 'quoting'


def test_advance_conflicts_when_status_changes_underneath(app_context: Flask, monkeypatch):
    mgr = make_manager()
    order = create_order(make_engineer(), responsible=mgr)
    read_order = order_service.get_order

    def read_then_other_manager_advances(order_id):
        loaded = read_order(order_id)
        session = get_db()
        session.execute(
            update(Order).where(Order.id == order_id).values(status='quoting')
            .execution_options(synchronize_session=False)
        )
        session.commit()
        return loaded

    monkeypatch.setattr(order_service, 'get_order', read_then_other_manager_advances)
    with pytest.raises(ConflictError):
        order_service.advance_order(mgr.id, mgr.name, order.id)
    assert _status(order.id) == 'quoting'
    assert _updates(order.id) == []
