from flask import Blueprint, jsonify, request
from flask_login import current_user

from .. import catalog, orders
from ..models import Role
from ..schemas import (MenuItemInput, MenuItemUpdateInput, OrderStatusInput,
                       RestaurantInput, changes, parse)
from ..security import role_required
from ..storage import staged_upload
from . import request_data

bp = Blueprint('seller', __name__, url_prefix='/api/seller')


def _uploaded_image():
    # Файл сохраняется только после проверки тела запроса
    return staged_upload(request.files.get('image'))


# ---------------------- Restaurant ----------------------

@bp.get('/restaurant')
@role_required(Role.SELLER)
def get_restaurant():
    restaurant = catalog.get_own_restaurant(current_user.id)
    return jsonify(restaurant.to_dict() if restaurant else None)


@bp.put('/restaurant')
@role_required(Role.SELLER)
def save_restaurant():
    fields = changes(parse(RestaurantInput, request_data()))
    with _uploaded_image() as image:
        if image:
            fields['image'] = image
        restaurant = catalog.upsert_own_restaurant(current_user.id, fields)
    return jsonify(restaurant.to_dict())


# ---------------------- Menu ----------------------

@bp.get('/menu')
@role_required(Role.SELLER)
def get_menu():
    return jsonify([item.to_dict() for item in catalog.list_own_menu(current_user.id)])


@bp.post('/menu')
@role_required(Role.SELLER)
def add_menu_item():
    fields = parse(MenuItemInput, request_data()).model_dump()
    with _uploaded_image() as image:
        if image:
            fields['image'] = image
        menu_item = catalog.add_menu_item(current_user.id, fields)
    return jsonify(menu_item.to_dict()), 201


@bp.put('/menu/<int:menu_item_id>')
@role_required(Role.SELLER)
def update_menu_item(menu_item_id):
    fields = changes(parse(MenuItemUpdateInput, request_data()))
    with _uploaded_image() as image:
        if image:
            fields['image'] = image
        menu_item = catalog.update_menu_item(current_user.id, menu_item_id, fields)
    return jsonify(menu_item.to_dict())


@bp.delete('/menu/<int:menu_item_id>')
@role_required(Role.SELLER)
def delete_menu_item(menu_item_id):
    catalog.delete_menu_item(current_user.id, menu_item_id)
    return jsonify({'message': 'Menu item deleted'})


# ---------------------- Orders ----------------------

@bp.get('/orders')
@role_required(Role.SELLER)
def get_orders():
    return jsonify([order.to_dict() for order in orders.seller_orders(current_user.id)])


@bp.put('/orders/<int:order_id>/status')
@role_required(Role.SELLER)
def update_order_status(order_id):
    data = parse(OrderStatusInput, request_data())
    order = orders.update_order_status(current_user.id, order_id, data.status)
    return jsonify(order.to_dict())


# ---------------------- Analytics ----------------------

@bp.get('/analytics')
@role_required(Role.SELLER)
def analytics():
    return jsonify(catalog.seller_analytics(current_user.id))


@bp.get('/forecast')
@role_required(Role.SELLER)
def forecast():
    return jsonify(catalog.seller_forecast(current_user.id))
