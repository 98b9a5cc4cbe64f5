import csv
import io
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from dinesmart import oversight
from dinesmart.database import db
from dinesmart.models import AdminLog, Order, OrderStatus, Role, User, UserStatus


def test_approve_pending_seller(client, admin, make_user, auth):
    seller = make_user(Role.SELLER, UserStatus.PENDING)
    response = client.put(f'/api/admin/users/{seller.id}/approve', headers=auth(admin))
    assert response.status_code == 200
    assert db.session.get(User, seller.id).status == UserStatus.APPROVED

    log = AdminLog.query.one()
    assert log.action == 'Approved Seller'
    assert log.admin_id == admin.id
    assert log.target_user_id == seller.id


def test_approve_requires_pending_seller(client, admin, customer, auth):
    response = client.put(f'/api/admin/users/{customer.id}/approve', headers=auth(admin))
    assert response.status_code == 404
    assert AdminLog.query.count() == 0


def test_reject_seller(client, admin, make_user, auth):
    seller = make_user(Role.SELLER, UserStatus.PENDING)
    response = client.put(f'/api/admin/users/{seller.id}/reject', headers=auth(admin))
    assert response.status_code == 200
    assert db.session.get(User, seller.id).status == UserStatus.REJECTED
    assert AdminLog.query.one().action == 'Rejected Seller'


def test_suspend_missing_user(client, admin, auth):
    response = client.put('/api/admin/users/999/suspend', headers=auth(admin))
    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'
    assert AdminLog.query.count() == 0


def test_suspend_and_reactivate(client, admin, customer, auth):
    assert client.put(f'/api/admin/users/{customer.id}/reactivate',
                      headers=auth(admin)).status_code == 404

    assert client.put(f'/api/admin/users/{customer.id}/suspend',
                      headers=auth(admin)).status_code == 200
    assert db.session.get(User, customer.id).status == UserStatus.SUSPENDED

    assert client.put(f'/api/admin/users/{customer.id}/reactivate',
                      headers=auth(admin)).status_code == 200
    assert db.session.get(User, customer.id).status == UserStatus.APPROVED
    assert [log.action for log in AdminLog.query.order_by(AdminLog.id)] == \
        ['Suspended User', 'Reactivated User']


def test_admin_cannot_suspend_self(client, admin, auth):
    response = client.put(f'/api/admin/users/{admin.id}/suspend', headers=auth(admin))
    assert response.status_code == 409
    assert db.session.get(User, admin.id).status == UserStatus.APPROVED


def test_failed_log_write_keeps_action(client, admin, customer, auth, monkeypatch):
    def broken_log(**kwargs):
        raise SQLAlchemyError('log table unavailable')
    monkeypatch.setattr(oversight, 'AdminLog', broken_log)

    response = client.put(f'/api/admin/users/{customer.id}/suspend', headers=auth(admin))
    assert response.status_code == 200
    assert db.session.get(User, customer.id).status == UserStatus.SUSPENDED


def test_admin_routes_need_admin(client, customer, auth):
    assert client.get('/api/admin/users', headers=auth(customer)).status_code == 403
    assert client.get('/api/admin/users').status_code == 401


def test_list_users_filters(client, admin, make_user, auth):
    make_user(Role.SELLER, UserStatus.PENDING)
    make_user(Role.SELLER)
    pending = client.get('/api/admin/users?role=seller&status=pending',
                         headers=auth(admin)).get_json()
    assert len(pending) == 1
    assert 'password' not in pending[0]
    assert len(client.get('/api/admin/users', headers=auth(admin)).get_json()) == 3


def add_order(customer, seller, restaurant, amount, status, created_at):
    order = Order(customer_id=customer.id, seller_id=seller.id, restaurant_id=restaurant.id,
                  total_amount=amount, status=status, created_at=created_at)
    db.session.add(order)
    db.session.commit()
    return order


def test_analytics_orders_and_revenue(client, admin, customer, auth, make_restaurant):
    seller, restaurant = make_restaurant()
    add_order(customer, seller, restaurant, 2400, OrderStatus.COMPLETED, datetime(2025, 1, 5))
    add_order(customer, seller, restaurant, 1700, OrderStatus.COMPLETED, datetime(2025, 1, 20))
    add_order(customer, seller, restaurant, 1000, OrderStatus.COMPLETED, datetime(2025, 3, 2))
    add_order(customer, seller, restaurant, 5000, OrderStatus.CANCELLED, datetime(2025, 3, 9))

    analytics = client.get('/api/admin/analytics', headers=auth(admin)).get_json()
    assert analytics == {'totalUsers': 3, 'totalRestaurants': 1, 'totalOrders': 4}

    trend = client.get('/api/admin/revenue-trend', headers=auth(admin)).get_json()
    assert trend == [{'month': '2025-01', 'revenue': 4100.0},
                     {'month': '2025-03', 'revenue': 1000.0}]

    orders = client.get('/api/admin/orders', headers=auth(admin)).get_json()
    assert len(orders) == 4
    assert orders[0]['customer_email'] == customer.email
    assert orders[0]['seller_email'] == seller.email
    assert orders[0]['restaurant_name'] == 'The Koththu Lab'


def test_logs_and_exports(client, admin, make_user, auth):
    seller = make_user(Role.SELLER, UserStatus.PENDING)
    client.put(f'/api/admin/users/{seller.id}/approve', headers=auth(admin))

    logs = client.get('/api/admin/logs', headers=auth(admin)).get_json()
    assert logs[0]['admin_email'] == admin.email
    assert logs[0]['target_user_email'] == seller.email

    response = client.get('/api/admin/export/users', headers=auth(admin))
    assert response.mimetype == 'text/csv'
    assert 'users.csv' in response.headers['Content-Disposition']
    rows = list(csv.DictReader(io.StringIO(response.get_data(as_text=True))))
    assert {row['email'] for row in rows} == {admin.email, seller.email}
    assert 'password' not in rows[0]

    log_rows = list(csv.DictReader(io.StringIO(
        client.get('/api/admin/export/logs', headers=auth(admin)).get_data(as_text=True))))
    assert log_rows[0]['action'] == 'Approved Seller'

    orders_csv = client.get('/api/admin/export/orders', headers=auth(admin))
    assert orders_csv.get_data(as_text=True).splitlines()[0] == ','.join(oversight.ORDER_COLUMNS)
