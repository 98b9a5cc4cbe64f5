"""
Admin oversight: user moderation, audit log and reporting.

Every successful moderation action appends one AdminLog entry. The log is
written after the action is committed and in its own transaction, so a
failing log write never undoes the action itself.
"""
import csv
import io

from flask import current_app
from sqlalchemy import extract, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased

from .database import db
from .errors import Conflict, NotFound
from .models import AdminLog, Order, OrderStatus, Restaurant, Role, User, UserStatus

USER_COLUMNS = ['id', 'name', 'email', 'role', 'status', 'created_at']
ORDER_COLUMNS = ['id', 'status', 'total_amount', 'created_at',
                 'customer_email', 'restaurant_name', 'seller_email']
LOG_COLUMNS = ['id', 'action', 'created_at', 'admin_email', 'target_user_email']


def log_admin_action(admin_id, action, target_user_id=None):
    try:
        db.session.add(AdminLog(admin_id=admin_id, action=action,
                                target_user_id=target_user_id))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error('Admin log failed: %s', e)


def _set_status(admin_id, user_id, new_status, action, not_found, *criteria):
    updated = User.query.filter(User.id == user_id, *criteria)\
                        .update({User.status: new_status}, synchronize_session=False)
    if not updated:
        db.session.rollback()
        raise NotFound(not_found)
    db.session.commit()
    current_app.logger.info('Admin %s: %s %s', admin_id, action, user_id)
    log_admin_action(admin_id, action, user_id)


def approve_seller(admin_id, user_id):
    _set_status(admin_id, user_id, UserStatus.APPROVED, 'Approved Seller', 'Seller not found',
                User.role == Role.SELLER, User.status == UserStatus.PENDING)


def reject_seller(admin_id, user_id):
    _set_status(admin_id, user_id, UserStatus.REJECTED, 'Rejected Seller', 'Seller not found',
                User.role == Role.SELLER, User.status == UserStatus.PENDING)


def suspend_user(admin_id, user_id):
    if user_id == admin_id:
        raise Conflict('You cannot suspend your own account')
    _set_status(admin_id, user_id, UserStatus.SUSPENDED, 'Suspended User', 'User not found')


def reactivate_user(admin_id, user_id):
    _set_status(admin_id, user_id, UserStatus.APPROVED, 'Reactivated User', 'User not found',
                User.status == UserStatus.SUSPENDED)


# ---------------------- Reports ----------------------

def list_users(role=None, status=None):
    query = User.query
    if role:
        query = query.filter(User.role == role.upper())
    if status:
        query = query.filter(User.status == status.upper())
    return [user.to_dict() for user in query.order_by(User.id).all()]


def analytics():
    return {
        'totalUsers': User.query.count(),
        'totalRestaurants': Restaurant.query.count(),
        'totalOrders': Order.query.count(),
    }


def all_orders():
    customer = aliased(User)
    seller = aliased(User)
    rows = db.session.query(Order, customer.email, Restaurant.name, seller.email)\
                     .join(customer, Order.customer_id == customer.id)\
                     .join(Restaurant, Order.restaurant_id == Restaurant.id)\
                     .join(seller, Restaurant.seller_id == seller.id)\
                     .order_by(Order.created_at.desc(), Order.id.desc())\
                     .all()
    return [{
        'id': order.id,
        'status': order.status,
        'total_amount': order.total_amount,
        'created_at': order.created_at.isoformat() if order.created_at else None,
        'customer_email': customer_email,
        'restaurant_name': restaurant_name,
        'seller_email': seller_email,
    } for order, customer_email, restaurant_name, seller_email in rows]


def admin_logs():
    logs = AdminLog.query.order_by(AdminLog.created_at.desc(), AdminLog.id.desc()).all()
    return [log.to_dict() for log in logs]


def monthly_revenue():
    year = extract('year', Order.created_at)
    month = extract('month', Order.created_at)
    rows = db.session.query(year, month, func.sum(Order.total_amount))\
                     .filter(Order.status == OrderStatus.COMPLETED)\
                     .group_by(year, month)\
                     .order_by(year, month)\
                     .all()
    return [{'month': f'{int(y):04d}-{int(m):02d}', 'revenue': float(revenue or 0)}
            for y, m, revenue in rows]


def to_csv(records, columns):
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction='ignore')
    writer.writeheader()
    writer.writerows(records)
    return buffer.getvalue()
