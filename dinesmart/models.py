from flask_login import UserMixin

from .database import db, utcnow


class Role:
    ADMIN = 'ADMIN'
    SELLER = 'SELLER'
    CUSTOMER = 'CUSTOMER'

    ALL = (ADMIN, SELLER, CUSTOMER)


class UserStatus:
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    SUSPENDED = 'SUSPENDED'


class OrderStatus:
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    PREPARING = 'PREPARING'
    READY = 'READY'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'

    ALL = (PENDING, CONFIRMED, PREPARING, READY, COMPLETED, CANCELLED)


DEFAULT_PORTION = 'regular'


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.CUSTOMER)
    status = db.Column(db.String(20), nullable=False, default=UserStatus.APPROVED)
    created_at = db.Column(db.DateTime, default=utcnow)

    restaurant = db.relationship('Restaurant', backref='seller', uselist=False, lazy=True)

    @property
    def is_active(self):
        return self.status == UserStatus.APPROVED

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'status': self.status,
            'created_at': _iso(self.created_at),
        }


class Restaurant(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False)
    name = db.Column(db.String(150), nullable=False)
    contact = db.Column(db.String(50))
    address = db.Column(db.String(255))
    cuisines = db.Column(db.JSON, default=list)
    opening_hours = db.Column(db.String(100))
    image = db.Column(db.String(255))
    status = db.Column(db.String(20), default='ACTIVE')  # ACTIVE, INACTIVE
    created_at = db.Column(db.DateTime, default=utcnow)

    menu_items = db.relationship('MenuItem', backref='restaurant', lazy=True,
                                 cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'seller_id': self.seller_id,
            'name': self.name,
            'contact': self.contact,
            'address': self.address,
            'cuisines': list(self.cuisines or []),
            'opening_hours': self.opening_hours,
            'image': self.image,
            'status': self.status,
        }


class MenuItem(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurant.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Float, nullable=False)  # цена порции regular
    portion_prices = db.Column(db.JSON, default=dict)  # {'large': 1500, ...}
    stock = db.Column(db.Integer, nullable=False, default=0)
    image = db.Column(db.String(255))
    is_available = db.Column(db.Boolean, default=True)
    orders_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)

    def price_for(self, portion):
        """Unit price of a portion, or None if the item has no such portion."""
        if portion in (None, DEFAULT_PORTION):
            return self.price
        prices = self.portion_prices or {}
        if portion in prices:
            return float(prices[portion])
        return None

    def to_dict(self):
        return {
            'id': self.id,
            'restaurant_id': self.restaurant_id,
            'name': self.name,
            'price': self.price,
            'portion_prices': dict(self.portion_prices or {}),
            'stock': self.stock,
            'image': self.image,
            'is_available': self.is_available,
            'orders_count': self.orders_count,
        }


class Order(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    seller_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurant.id'), nullable=False)
    total_amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    items = db.relationship('OrderItem', backref='order', lazy=True,
                            cascade='all, delete-orphan', order_by='OrderItem.id')
    customer = db.relationship('User', foreign_keys=[customer_id])
    restaurant = db.relationship('Restaurant')

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'seller_id': self.seller_id,
            'restaurant_id': self.restaurant_id,
            'items': [item.to_dict() for item in self.items],
            'total_amount': self.total_amount,
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class OrderItem(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('order.id'), nullable=False)
    # Ссылка обнуляется при удалении блюда, снимок name/unit_price остаётся
    menu_item_id = db.Column(db.Integer, db.ForeignKey('menu_item.id', ondelete='SET NULL'))
    portion = db.Column(db.String(30), nullable=False, default=DEFAULT_PORTION)
    quantity = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    unit_price = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            'menu_item_id': self.menu_item_id,
            'portion': self.portion,
            'quantity': self.quantity,
            'name': self.name,
            'unit_price': self.unit_price,
            'line_total': self.unit_price * self.quantity,
        }


class PasswordReset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    token_hash = db.Column(db.String(64), unique=True, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)


class AdminLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    action = db.Column(db.String(100), nullable=False)
    target_user_id = db.Column(db.Integer, db.ForeignKey('user.id'))
    created_at = db.Column(db.DateTime, default=utcnow)

    admin = db.relationship('User', foreign_keys=[admin_id])
    target_user = db.relationship('User', foreign_keys=[target_user_id])

    def to_dict(self):
        return {
            'id': self.id,
            'action': self.action,
            'created_at': _iso(self.created_at),
            'admin_email': self.admin.email if self.admin else None,
            'target_user_email': self.target_user.email if self.target_user else None,
        }
