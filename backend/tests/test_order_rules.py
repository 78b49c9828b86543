"""Pure rules of the order pipeline: steps, next status, stats, labels."""
from procurement.constants.orders import ORDER_PIPELINE, STATUS_LABELS, URGENCY_LABELS, ALL_URGENCIES
from procurement.models.order import Order
from procurement.services.orders import status_step, next_status, compute_stats, compute_manager_stats


def _orders(*statuses, responsible_id=None):
    return [Order(status=s, responsible_id=responsible_id) for s in statuses]


def test_status_step_strictly_increasing_along_pipeline():
    steps = [status_step(s) for s in ORDER_PIPELINE]
    assert steps == [1, 2, 3, 4, 5]


def test_next_status_consistent_with_step():
    for status in ORDER_PIPELINE[:-1]:
        nxt = next_status(status)
        assert status_step(nxt) == status_step(status) + 1
    assert next_status('delivered') is None


def test_compute_stats_counts_and_total():
    orders = _orders('pending', 'pending', 'quoting', 'purchased', 'shipping', 'delivered')
    stats = compute_stats(orders)
    assert stats == {'total': 6, 'pending': 2, 'in_progress': 3, 'delivered': 1}
    assert stats['total'] == stats['pending'] + stats['in_progress'] + stats['delivered']


def test_compute_stats_is_pure():
    orders = _orders('pending', 'shipping', 'delivered')
    first = compute_stats(orders)
    second = compute_stats(orders)
    assert first == second
    assert [o.status for o in orders] == ['pending', 'shipping', 'delivered']


def test_compute_stats_accepts_plain_rows():
    rows = [{'status': 'pending'}, {'status': 'delivered'}]
    assert compute_stats(rows) == {'total': 2, 'pending': 1, 'in_progress': 0, 'delivered': 1}


def test_compute_stats_empty():
    assert compute_stats([]) == {'total': 0, 'pending': 0, 'in_progress': 0, 'delivered': 0}


def test_manager_stats_counts_only_open_orders_i_own():
    mine = _orders('quoting', 'delivered', responsible_id=7)
    others = _orders('pending', 'shipping', responsible_id=8)
    unclaimed = _orders('pending')
    stats = compute_manager_stats(mine + others + unclaimed, manager_id=7)
    assert stats['my_orders_count'] == 1
    assert stats['total'] == 5


def test_label_tables_cover_every_value():
    assert set(STATUS_LABELS) == set(ORDER_PIPELINE)
    assert set(URGENCY_LABELS) == set(ALL_URGENCIES)
    assert STATUS_LABELS['quoting'] == 'Em Cotação'
