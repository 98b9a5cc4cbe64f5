from datetime import datetime

import pytest

from dinesmart.database import db
from dinesmart.models import MenuItem, Order, OrderStatus


@pytest.fixture
def order(client, customer, auth, shop):
    _, restaurant, koththu, _ = shop
    response = client.post('/api/customer/order', headers=auth(customer), json={
        'restaurantId': restaurant.id,
        'items': [{'menuItemId': koththu.id, 'quantity': 2}],
    })
    return response.get_json()['order']


def set_status(client, headers, order_id, status):
    return client.put(f'/api/seller/orders/{order_id}/status', headers=headers,
                      json={'status': status})


def test_full_lifecycle(client, auth, shop, order):
    seller = shop[0]
    for status in ('CONFIRMED', 'PREPARING', 'READY', 'COMPLETED'):
        response = set_status(client, auth(seller), order['id'], status)
        assert response.status_code == 200
        assert response.get_json()['status'] == status
    assert db.session.get(Order, order['id']).status == OrderStatus.COMPLETED


def test_status_change_records_update_time(client, auth, shop, order):
    assert order['updated_at'] is not None
    db.session.get(Order, order['id']).updated_at = datetime(2020, 1, 1)
    db.session.commit()

    response = set_status(client, auth(shop[0]), order['id'], 'CONFIRMED')
    changed_at = datetime.fromisoformat(response.get_json()['updated_at'])
    assert changed_at > datetime(2020, 1, 1)
    assert changed_at >= datetime.fromisoformat(order['created_at'])


def test_status_value_is_case_insensitive(client, auth, shop, order):
    response = set_status(client, auth(shop[0]), order['id'], 'confirmed')
    assert response.status_code == 200
    assert response.get_json()['status'] == OrderStatus.CONFIRMED


def test_skipping_states_is_a_conflict(client, auth, shop, order):
    response = set_status(client, auth(shop[0]), order['id'], 'READY')
    assert response.status_code == 409
    assert response.get_json()['error'] == 'conflict'
    assert db.session.get(Order, order['id']).status == OrderStatus.PENDING


@pytest.mark.parametrize('terminal', ['CANCELLED', 'COMPLETED'])
def test_terminal_states_are_final(client, auth, shop, order, terminal):
    seller = shop[0]
    path = {'CANCELLED': ['CANCELLED'],
            'COMPLETED': ['CONFIRMED', 'PREPARING', 'READY', 'COMPLETED']}[terminal]
    for status in path:
        assert set_status(client, auth(seller), order['id'], status).status_code == 200

    for status in OrderStatus.ALL:
        assert set_status(client, auth(seller), order['id'], status).status_code == 409
    assert db.session.get(Order, order['id']).status == terminal


def test_unknown_status_is_invalid_input(client, auth, shop, order):
    response = set_status(client, auth(shop[0]), order['id'], 'SHIPPED')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'invalid_input'


@pytest.mark.parametrize('status', ['CONFIRMED', 'CANCELLED', 'SHIPPED', 'completed'])
def test_other_seller_gets_not_found(client, auth, make_restaurant, order, status):
    stranger, _ = make_restaurant(name='Rival Kitchen')
    response = set_status(client, auth(stranger), order['id'], status)
    missing = set_status(client, auth(stranger), 999, status)

    assert response.status_code == 404
    assert response.get_json() == missing.get_json()
    assert db.session.get(Order, order['id']).status == OrderStatus.PENDING


def test_cancelling_does_not_restore_stock(client, auth, shop, order):
    seller, _, koththu, _ = shop
    assert set_status(client, auth(seller), order['id'], 'CANCELLED').status_code == 200
    item = db.session.get(MenuItem, koththu.id)
    assert item.stock == 23
    assert item.orders_count == 2


def test_seller_lists_only_own_orders(client, customer, auth, shop, order,
                                      make_restaurant, make_item):
    seller = shop[0]
    rival, rival_restaurant = make_restaurant(name='Rival Kitchen')
    dish = make_item(rival_restaurant, name='Rival Dish')
    client.post('/api/customer/order', headers=auth(customer), json={
        'restaurantId': rival_restaurant.id,
        'items': [{'menuItemId': dish.id, 'quantity': 1}],
    })

    own = client.get('/api/seller/orders', headers=auth(seller)).get_json()
    assert [o['id'] for o in own] == [order['id']]
    assert len(client.get('/api/seller/orders', headers=auth(rival)).get_json()) == 1
