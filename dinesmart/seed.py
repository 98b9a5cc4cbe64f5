from flask import current_app
from werkzeug.security import generate_password_hash

from .database import db
from .models import MenuItem, Restaurant, Role, User, UserStatus


def _get_or_create_user(name, email, password, role, status):
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(name=name, email=email, password=generate_password_hash(password),
                    role=role, status=status)
        db.session.add(user)
        db.session.flush()
    return user


def seed_admin():
    if User.query.filter_by(role=Role.ADMIN).first():
        current_app.logger.info('Admin already exists - skipping seed')
        return None
    admin = _get_or_create_user(
        current_app.config['ADMIN_NAME'],
        current_app.config['ADMIN_EMAIL'],
        current_app.config['ADMIN_PASSWORD'],
        Role.ADMIN,
        UserStatus.APPROVED,
    )
    db.session.commit()
    current_app.logger.info('Admin seeded: %s', admin.email)
    return admin


def seed_demo():
    seed_admin()

    seller = _get_or_create_user('The Koththu Lab', 'seller@dinesmart.com', 'seller123',
                                 Role.SELLER, UserStatus.APPROVED)
    _get_or_create_user('Manumi Vinulya', 'customer@dinesmart.com', 'customer123',
                        Role.CUSTOMER, UserStatus.APPROVED)
    _get_or_create_user('Pending Seller', 'pending@dinesmart.com', 'seller123',
                        Role.SELLER, UserStatus.PENDING)

    if not Restaurant.query.filter_by(seller_id=seller.id).first():
        restaurant = Restaurant(
            seller_id=seller.id,
            name='The Koththu Lab',
            cuisines=['Sri Lankan', 'Street Food'],
            image='https://images.unsplash.com/photo-1555396273-367ea4eb4db5',
        )
        db.session.add(restaurant)
        db.session.flush()

        menu_items = [
            MenuItem(restaurant_id=restaurant.id, name='Chicken Koththu', price=1200,
                     portion_prices={'large': 1500}, stock=25,
                     image='https://images.unsplash.com/photo-1600891964599-f61ba0e24092'),
            MenuItem(restaurant_id=restaurant.id, name='Cheese Koththu', price=1400,
                     portion_prices={'large': 1700}, stock=18,
                     image='https://images.unsplash.com/photo-1540189549336-e6e99c3679fe'),
        ]
        for item in menu_items:
            db.session.add(item)

    db.session.commit()
    current_app.logger.info('Demo data ready')
