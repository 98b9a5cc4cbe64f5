import pytest
from flask import g
from werkzeug.security import generate_password_hash

from dinesmart import create_app
from dinesmart.config import TestingConfig
from dinesmart.database import db
from dinesmart.models import MenuItem, Restaurant, Role, User, UserStatus
from dinesmart.security import create_token


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig)
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    # Контекст приложения общий для всех запросов теста, пользователь Flask-Login
    # не должен переходить из одного запроса в другой
    @app.teardown_request
    def forget_login_user(exc):
        g.pop('_login_user', None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def make(role=Role.CUSTOMER, status=UserStatus.APPROVED, email=None,
             name='Test User', password='secret123'):
        counter['n'] += 1
        user = User(
            name=name,
            email=email or f"{role.lower()}{counter['n']}@example.com",
            password=generate_password_hash(password),
            role=role,
            status=status,
        )
        db.session.add(user)
        db.session.commit()
        return user
    return make


@pytest.fixture
def auth():
    def headers(user):
        return {'Authorization': f'Bearer {create_token(user)}'}
    return headers


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, name='Admin')


@pytest.fixture
def customer(make_user):
    return make_user(Role.CUSTOMER, name='Manumi')


@pytest.fixture
def make_restaurant(make_user):
    def make(name='The Koththu Lab', cuisines=('Sri Lankan',)):
        seller = make_user(Role.SELLER, name=name)
        restaurant = Restaurant(seller_id=seller.id, name=name, cuisines=list(cuisines))
        db.session.add(restaurant)
        db.session.commit()
        return seller, restaurant
    return make


@pytest.fixture
def make_item():
    def make(restaurant, name='Chicken Koththu', price=1200, stock=25, **kwargs):
        kwargs.setdefault('portion_prices', {'large': 1500})
        kwargs.setdefault('orders_count', 0)
        item = MenuItem(restaurant_id=restaurant.id, name=name, price=price,
                        stock=stock, **kwargs)
        db.session.add(item)
        db.session.commit()
        return item
    return make


@pytest.fixture
def shop(make_restaurant, make_item):
    """A seller with a restaurant and two menu items."""
    seller, restaurant = make_restaurant()
    koththu = make_item(restaurant)
    cheese = make_item(restaurant, name='Cheese Koththu', price=1400, stock=18,
                       portion_prices={'large': 1700})
    return seller, restaurant, koththu, cheese
