import pytest
from flask import Flask
from procurement.config.pagination import normalize_pagination, MAX_LIMIT
from procurement.errors import ValidationError
from tests.test_utils_seed import make_engineer, auth_headers, create_order


def test_defaults_and_clamping():
    assert normalize_pagination(None, None) == (50, 0)
    assert normalize_pagination('0', '3') == (1, 3)
    assert normalize_pagination(str(MAX_LIMIT + 1), '') == (MAX_LIMIT, 0)


@pytest.mark.parametrize('limit,offset', [('abc', None), (None, 'x'), ('10', '-1')])
def test_bad_values_rejected(limit, offset):
    with pytest.raises(ValidationError):
        normalize_pagination(limit, offset)


def test_list_envelope_pages_newest_first(app_context: Flask):
    client = app_context.test_client()
    eng = make_engineer()
    orders = [create_order(eng, materials=f'lote {i}') for i in range(3)]
    resp = client.get('/orders?limit=2&offset=0', headers=auth_headers(eng))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['pagination'] == {'total': 3, 'limit': 2, 'offset': 0, 'returned': 2}
    assert [o['id'] for o in body['data']] == [orders[2].id, orders[1].id]
    resp = client.get('/orders?offset=-5', headers=auth_headers(eng))
    assert resp.status_code == 400
