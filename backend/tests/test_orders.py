import pytest
from datetime import date, datetime, timedelta
from flask import Flask
from procurement.errors import ValidationError, ForbiddenError
from procurement.services import orders as order_service
from tests.test_utils_seed import make_engineer, make_manager, ensure_user, unique_email, auth_headers, create_order, tomorrow


def _payload(**overrides):
    body = {'materials': '50 bags cement', 'cost_center': 'Fazenda JFI', 'deadline': tomorrow(), 'urgency': 'high'}
    body.update(overrides)
    return body


def test_create_order_scenario(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    resp = client.post('/orders', json=_payload(), headers=auth_headers(eng))
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body['status'] == 'pending'
    assert body['urgency'] == 'high'
    assert body['responsible_id'] is None
    assert body['engineer_id'] == eng.id
    assert body['engineer_name'] == eng.name
    assert body['status_step'] == 1
    assert body['status_label'] == 'Pendente'
    assert body['next_status'] == 'quoting'
    assert body['urgency_label'] == 'Alta'


def test_create_order_defaults_urgency_to_normal(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    payload = _payload()
    del payload['urgency']
    resp = client.post('/orders', json=payload, headers=auth_headers(eng))
    assert resp.status_code == 201
    assert resp.get_json()['urgency'] == 'normal'


@pytest.mark.parametrize('overrides', [
    {'materials': ''},
    {'materials': '   '},
    {'cost_center': None},
    {'cost_center': 'Fazenda Inexistente'},
    {'deadline': ''},
    {'deadline': '19/10/2026'},
    {'deadline': (date.today() - timedelta(days=1)).isoformat()},
    {'urgency': 'critical'},
])
def test_create_order_rejects_invalid_fields(app_context: Flask, overrides):
    client = app_context.test_client()
    eng = make_engineer()
    resp = client.post('/orders', json=_payload(**overrides), headers=auth_headers(eng))
    assert resp.status_code == 400
    assert resp.get_json()['error']['code'] == 'VALIDATION'


def test_deadline_today_is_accepted(app_context: Flask):
    eng = make_engineer()
    order = order_service.create_order(eng.id, eng.name, 'areia', 'Sítio Vale', date.today().isoformat())
    assert order.deadline == date.today()


def test_create_order_accepts_datetime_deadline(app_context: Flask):
    eng = make_engineer()
    order = order_service.create_order(eng.id, eng.name, 'tijolos', 'Sítio Vale',
                                       datetime(2026, 3, 5, 17, 45), today=date(2026, 3, 5))
    assert order.deadline == date(2026, 3, 5)
    with pytest.raises(ValidationError):
        order_service.create_order(eng.id, eng.name, 'tijolos', 'Sítio Vale',
                                   datetime(2026, 3, 4, 23, 59), today=date(2026, 3, 5))


def test_create_order_service_uses_reference_day(app_context: Flask):
    eng = make_engineer()
    with pytest.raises(ValidationError):
        order_service.create_order(eng.id, eng.name, 'brita', 'Sítio Vale', '2026-01-01', today=date(2026, 1, 2))
    order = order_service.create_order(eng.id, eng.name, 'brita', 'Sítio Vale', '2026-01-02', today=date(2026, 1, 2))
    assert order.status == 'pending'
    assert order.responsible_id is None


def test_pending_user_cannot_create_orders(app_context: Flask):
    client = app_context.test_client()
    waiting = ensure_user(unique_email('waiting'))
    resp = client.post('/orders', json=_payload(), headers=auth_headers(waiting))
    assert resp.status_code == 403
    # even with a forged permission claim the engine checks the stored role
    with pytest.raises(ForbiddenError):
        order_service.create_order(waiting.id, waiting.name, 'cimento', 'Casa Felipe', tomorrow())


def test_engineer_sees_only_own_orders(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    other = make_engineer()
    mine = create_order(eng)
    theirs = create_order(other)
    resp = client.get('/orders', headers=auth_headers(eng))
    assert resp.status_code == 200
    body = resp.get_json()
    ids = [o['id'] for o in body['data']]
    assert ids == [mine.id]
    assert body['pagination']['total'] == 1
    resp = client.get(f'/orders/{theirs.id}', headers=auth_headers(eng))
    assert resp.status_code == 403
    resp = client.get(f'/orders/{mine.id}', headers=auth_headers(eng))
    assert resp.status_code == 200


def test_engineer_orders_newest_first(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    first = create_order(eng)
    second = create_order(eng)
    ids = [o['id'] for o in client.get('/orders', headers=auth_headers(eng)).get_json()['data']]
    assert ids == [second.id, first.id]


def test_manager_can_read_any_order(app_context: Flask):
    client = app_context.test_client()
    order = create_order(make_engineer())
    resp = client.get(f'/orders/{order.id}', headers=auth_headers(make_manager()))
    assert resp.status_code == 200
    assert resp.get_json()['id'] == order.id


def test_unknown_order_is_404(app_context: Flask):
    client = app_context.test_client()
    resp = client.get('/orders/999999', headers=auth_headers(make_manager()))
    assert resp.status_code == 404
    assert resp.get_json()['error']['code'] == 'NOT_FOUND'


def test_invalid_scope_rejected(app_context: Flask):
    client = app_context.test_client()
    resp = client.get('/orders?scope=everything', headers=auth_headers(make_manager()))
    assert resp.status_code == 400


def test_engineer_stats_cover_own_orders(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    create_order(eng)
    create_order(eng, status='purchased')
    create_order(eng, status='delivered')
    resp = client.get('/orders/stats', headers=auth_headers(eng))
    assert resp.status_code == 200
    assert resp.get_json() == {'total': 3, 'pending': 1, 'in_progress': 1, 'delivered': 1}


def test_manager_stats_include_my_orders(app_context: Flask):
    client = app_context.test_client()
    mgr = make_manager()
    eng = make_engineer()
    create_order(eng, status='quoting', responsible=mgr)
    create_order(eng, status='delivered', responsible=mgr)
    body = client.get('/orders/stats', headers=auth_headers(mgr)).get_json()
    assert body['my_orders_count'] == 1
    assert body['total'] == body['pending'] + body['in_progress'] + body['delivered']
