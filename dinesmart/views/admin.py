from flask import Blueprint, Response, jsonify, request
from flask_login import current_user

from .. import oversight
from ..models import Role
from ..security import role_required

bp = Blueprint('admin', __name__, url_prefix='/api/admin')


def _csv(records, columns, filename):
    return Response(
        oversight.to_csv(records, columns),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


# ---------------------- Users ----------------------

@bp.get('/users')
@role_required(Role.ADMIN)
def users():
    return jsonify(oversight.list_users(request.args.get('role'), request.args.get('status')))


@bp.put('/users/<int:user_id>/approve')
@role_required(Role.ADMIN)
def approve_seller(user_id):
    oversight.approve_seller(current_user.id, user_id)
    return jsonify({'message': 'Seller approved successfully'})


@bp.put('/users/<int:user_id>/reject')
@role_required(Role.ADMIN)
def reject_seller(user_id):
    oversight.reject_seller(current_user.id, user_id)
    return jsonify({'message': 'Seller rejected successfully'})


@bp.put('/users/<int:user_id>/suspend')
@role_required(Role.ADMIN)
def suspend_user(user_id):
    oversight.suspend_user(current_user.id, user_id)
    return jsonify({'message': 'User suspended successfully'})


@bp.put('/users/<int:user_id>/reactivate')
@role_required(Role.ADMIN)
def reactivate_user(user_id):
    oversight.reactivate_user(current_user.id, user_id)
    return jsonify({'message': 'User reactivated successfully'})


# ---------------------- Analytics ----------------------

@bp.get('/analytics')
@role_required(Role.ADMIN)
def analytics():
    return jsonify(oversight.analytics())


@bp.get('/orders')
@role_required(Role.ADMIN)
def orders():
    return jsonify(oversight.all_orders())


@bp.get('/logs')
@role_required(Role.ADMIN)
def logs():
    return jsonify(oversight.admin_logs())


@bp.get('/revenue-trend')
@role_required(Role.ADMIN)
def revenue_trend():
    return jsonify(oversight.monthly_revenue())


# ---------------------- CSV export ----------------------

@bp.get('/export/users')
@role_required(Role.ADMIN)
def export_users():
    return _csv(oversight.list_users(), oversight.USER_COLUMNS, 'users.csv')


@bp.get('/export/orders')
@role_required(Role.ADMIN)
def export_orders():
    return _csv(oversight.all_orders(), oversight.ORDER_COLUMNS, 'orders.csv')


@bp.get('/export/logs')
@role_required(Role.ADMIN)
def export_logs():
    return _csv(oversight.admin_logs(), oversight.LOG_COLUMNS, 'admin_logs.csv')
