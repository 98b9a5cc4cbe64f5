"""
Order placement and order lifecycle.

Placement is all-or-nothing: every cart line is checked and its stock is taken
with a conditional UPDATE inside one transaction. If any line cannot be served
the transaction is rolled back and nothing is written. Stock taken by an order
is not given back when the order is cancelled.
"""
from flask import current_app

from .database import db, utcnow
from .errors import Conflict, InvalidInput, InvalidItem, NotFound
from .models import MenuItem, Order, OrderItem, OrderStatus, Restaurant

ORDER_TRANSITIONS = {
    OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    OrderStatus.CONFIRMED: (OrderStatus.PREPARING, OrderStatus.CANCELLED),
    OrderStatus.PREPARING: (OrderStatus.READY, OrderStatus.CANCELLED),
    OrderStatus.READY: (OrderStatus.COMPLETED,),
    OrderStatus.COMPLETED: (),
    OrderStatus.CANCELLED: (),
}


def _reserve(menu_item_id, restaurant_id, quantity):
    # Атомарное списание: 0 затронутых строк = блюдо недоступно или не хватает остатка
    return MenuItem.query.filter(
        MenuItem.id == menu_item_id,
        MenuItem.restaurant_id == restaurant_id,
        MenuItem.is_available.is_(True),
        MenuItem.stock >= quantity,
    ).update({
        MenuItem.stock: MenuItem.stock - quantity,
        MenuItem.orders_count: MenuItem.orders_count + quantity,
    }, synchronize_session=False)


def place_order(customer_id, restaurant_id, lines):
    restaurant = db.session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound('Restaurant not found')

    try:
        total_amount = 0
        order_items = []
        for line in lines:
            menu_item = MenuItem.query.filter_by(id=line.menu_item_id,
                                                 restaurant_id=restaurant.id).first()
            if menu_item is None:
                raise InvalidItem(f'Menu item {line.menu_item_id} not found')
            unit_price = menu_item.price_for(line.portion)
            if unit_price is None:
                raise InvalidItem(f"'{menu_item.name}' has no '{line.portion}' portion")
            if not menu_item.is_available:
                raise InvalidItem(f"'{menu_item.name}' is not available")
            if not _reserve(menu_item.id, restaurant.id, line.quantity):
                raise InvalidItem(f"Not enough stock for '{menu_item.name}'")

            total_amount += unit_price * line.quantity
            order_items.append(OrderItem(
                menu_item_id=menu_item.id,
                portion=line.portion,
                quantity=line.quantity,
                name=menu_item.name,
                unit_price=unit_price,
            ))

        order = Order(
            customer_id=customer_id,
            seller_id=restaurant.seller_id,
            restaurant_id=restaurant.id,
            total_amount=total_amount,
            status=OrderStatus.PENDING,
            items=order_items,
        )
        db.session.add(order)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info('Order %s placed by customer %s at restaurant %s (total %s)',
                            order.id, customer_id, restaurant.id, total_amount)
    return order


def customer_orders(customer_id):
    return Order.query.filter_by(customer_id=customer_id)\
                      .order_by(Order.created_at.desc(), Order.id.desc())\
                      .all()


def seller_orders(seller_id):
    return Order.query.join(Restaurant, Order.restaurant_id == Restaurant.id)\
                      .filter(Restaurant.seller_id == seller_id)\
                      .order_by(Order.created_at.desc(), Order.id.desc())\
                      .all()


def update_order_status(seller_id, order_id, new_status):
    # Чужой заказ неотличим от несуществующего
    order = Order.query.join(Restaurant, Order.restaurant_id == Restaurant.id)\
                       .filter(Order.id == order_id, Restaurant.seller_id == seller_id)\
                       .first()
    if order is None:
        raise NotFound('Order not found')

    new_status = (new_status or '').strip().upper()
    if new_status not in OrderStatus.ALL:
        raise InvalidInput(f'Unknown order status: {new_status}')

    current_status = order.status
    if new_status not in ORDER_TRANSITIONS[current_status]:
        raise Conflict(f'Cannot change order status from {current_status} to {new_status}')

    updated = Order.query.filter_by(id=order.id, status=current_status)\
                         .update({Order.status: new_status, Order.updated_at: utcnow()},
                                 synchronize_session=False)
    if not updated:
        db.session.rollback()
        raise Conflict('Order status was changed by another request')
    db.session.commit()

    current_app.logger.info('Order %s status %s -> %s by seller %s',
                            order.id, current_status, new_status, seller_id)
    return db.session.get(Order, order.id)
