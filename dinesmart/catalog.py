from flask import current_app
from sqlalchemy import extract, func

from .database import db
from .errors import InvalidInput, NotFound
from .models import MenuItem, Order, OrderItem, OrderStatus, Restaurant

WEEKDAYS = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')


# ---------------------- Restaurant ----------------------

def get_own_restaurant(seller_id):
    return Restaurant.query.filter_by(seller_id=seller_id).first()


def upsert_own_restaurant(seller_id, fields):
    restaurant = get_own_restaurant(seller_id)
    if restaurant is None:
        if not fields.get('name'):
            raise InvalidInput('Restaurant name is required')
        restaurant = Restaurant(seller_id=seller_id, cuisines=[])
        db.session.add(restaurant)
        current_app.logger.info('Restaurant profile created for seller %s', seller_id)

    for key, value in fields.items():
        setattr(restaurant, key, value)
    db.session.commit()
    return restaurant


def list_restaurants(cuisine=None):
    restaurants = Restaurant.query.filter_by(status='ACTIVE').order_by(Restaurant.name).all()
    if cuisine and cuisine.upper() != 'ALL':
        wanted = cuisine.strip().lower()
        restaurants = [r for r in restaurants
                       if wanted in (c.lower() for c in (r.cuisines or []))]
    return restaurants


def restaurant_menu(restaurant_id):
    restaurant = db.session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound('Restaurant not found')
    return MenuItem.query.filter_by(restaurant_id=restaurant.id, is_available=True)\
                         .order_by(MenuItem.name).all()


# ---------------------- Menu ----------------------

def list_own_menu(seller_id):
    restaurant = get_own_restaurant(seller_id)
    if restaurant is None:
        return []
    return MenuItem.query.filter_by(restaurant_id=restaurant.id).order_by(MenuItem.id).all()


def _own_menu_item(seller_id, menu_item_id):
    # Владение проверяется соединением с ресторанами продавца, а не данными запроса
    menu_item = MenuItem.query.join(Restaurant, MenuItem.restaurant_id == Restaurant.id)\
                              .filter(MenuItem.id == menu_item_id,
                                      Restaurant.seller_id == seller_id)\
                              .first()
    if menu_item is None:
        raise NotFound('Menu item not found')
    return menu_item


def add_menu_item(seller_id, fields):
    restaurant = get_own_restaurant(seller_id)
    if restaurant is None:
        raise NotFound('Restaurant not found, save your restaurant profile first')
    menu_item = MenuItem(restaurant_id=restaurant.id, orders_count=0, **fields)
    db.session.add(menu_item)
    db.session.commit()
    current_app.logger.info('Menu item %s added to restaurant %s', menu_item.id, restaurant.id)
    return menu_item


def update_menu_item(seller_id, menu_item_id, fields):
    menu_item = _own_menu_item(seller_id, menu_item_id)
    for key, value in fields.items():
        setattr(menu_item, key, value)
    db.session.commit()
    return menu_item


def delete_menu_item(seller_id, menu_item_id):
    menu_item = _own_menu_item(seller_id, menu_item_id)
    # Позиции заказов сохраняют снимок названия и цены
    OrderItem.query.filter_by(menu_item_id=menu_item.id)\
                   .update({OrderItem.menu_item_id: None}, synchronize_session=False)
    db.session.delete(menu_item)
    db.session.commit()
    current_app.logger.info('Menu item %s deleted by seller %s', menu_item_id, seller_id)


# ---------------------- Seller analytics ----------------------

def seller_analytics(seller_id):
    return [
        {'name': item.name, 'stock': item.stock, 'orders_count': item.orders_count}
        for item in list_own_menu(seller_id)
    ]


def seller_forecast(seller_id):
    restaurant = get_own_restaurant(seller_id)
    counts = dict.fromkeys(range(7), 0)
    if restaurant is not None:
        weekday = extract('dow', Order.created_at)
        rows = db.session.query(weekday, func.count(Order.id))\
                         .filter(Order.restaurant_id == restaurant.id,
                                 Order.status != OrderStatus.CANCELLED)\
                         .group_by(weekday).all()
        for day, count in rows:
            counts[int(day)] = count
    # Понедельник первым, как на графике продавца
    return [{'day': WEEKDAYS[day], 'orders': counts[day]} for day in (1, 2, 3, 4, 5, 6, 0)]


# ---------------------- Recommendations ----------------------

def recommend_restaurants(customer_id, limit=6):
    """Rank restaurants by menu popularity, boosting cuisines the customer ordered before."""
    popularity = dict(
        db.session.query(MenuItem.restaurant_id, func.sum(MenuItem.orders_count))
                  .group_by(MenuItem.restaurant_id).all()
    )
    ordered_from = db.select(Order.restaurant_id).where(Order.customer_id == customer_id)
    favourite = {
        cuisine.lower()
        for restaurant in Restaurant.query.filter(Restaurant.id.in_(ordered_from)).all()
        for cuisine in (restaurant.cuisines or [])
    }

    scored = []
    for restaurant in list_restaurants():
        cuisines = {c.lower() for c in (restaurant.cuisines or [])}
        score = (1 if cuisines & favourite else 0, int(popularity.get(restaurant.id) or 0))
        scored.append((score, restaurant))
    scored.sort(key=lambda pair: (pair[0], -pair[1].id), reverse=True)
    return [restaurant for _, restaurant in scored[:limit]]
