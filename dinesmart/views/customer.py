from flask import Blueprint, jsonify, request
from flask_login import current_user

from .. import catalog, orders
from ..models import Role
from ..schemas import PlaceOrderInput, parse
from ..security import role_required
from . import request_data

bp = Blueprint('customer', __name__, url_prefix='/api/customer')


@bp.get('/restaurants')
@role_required(Role.CUSTOMER)
def restaurants():
    cuisine = request.args.get('cuisine')
    return jsonify([r.to_dict() for r in catalog.list_restaurants(cuisine)])


@bp.get('/restaurants/<int:restaurant_id>/menu')
@role_required(Role.CUSTOMER)
def restaurant_menu(restaurant_id):
    return jsonify([item.to_dict() for item in catalog.restaurant_menu(restaurant_id)])


@bp.post('/order')
@role_required(Role.CUSTOMER)
def place_order():
    data = parse(PlaceOrderInput, request_data())
    order = orders.place_order(current_user.id, data.restaurant_id, data.items)
    return jsonify({'message': 'Order placed successfully', 'order': order.to_dict()}), 201


@bp.get('/orders')
@role_required(Role.CUSTOMER)
def order_history():
    return jsonify([order.to_dict() for order in orders.customer_orders(current_user.id)])


@bp.get('/recommendations')
@role_required(Role.CUSTOMER)
def recommendations():
    limit = request.args.get('limit', 6, type=int)
    limit = min(max(limit, 1), 50)
    recommended = catalog.recommend_restaurants(current_user.id, limit)
    return jsonify({'recommended': [r.to_dict() for r in recommended]})
