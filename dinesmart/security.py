from datetime import datetime, timezone
from functools import wraps

from flask import current_app
from flask_login import LoginManager, current_user
from jose import JWTError, jwt

from .database import db
from .errors import Forbidden, Unauthenticated
from .models import User, UserStatus

login_manager = LoginManager()
# Сессии не используются: личность берётся из Bearer-токена на каждый запрос
login_manager.session_protection = None


def create_token(user):
    now = datetime.now(timezone.utc)
    claims = {
        'sub': str(user.id),
        'role': user.role,
        'status': user.status,
        'email': user.email,
        'iat': now,
        'exp': now + current_app.config['JWT_EXPIRES'],
    }
    return jwt.encode(claims, current_app.config['JWT_SECRET'],
                      algorithm=current_app.config['JWT_ALGORITHM'])


def decode_token(token):
    try:
        return jwt.decode(token, current_app.config['JWT_SECRET'],
                          algorithms=[current_app.config['JWT_ALGORITHM']])
    except JWTError:
        return None


@login_manager.request_loader
def load_user_from_request(request):
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    claims = decode_token(header.split(' ', 1)[1].strip())
    if not claims or not str(claims.get('sub', '')).isdigit():
        return None
    user = db.session.get(User, int(claims['sub']))
    # Заблокированный после выдачи токена пользователь не проходит
    if user is None or user.status != UserStatus.APPROVED:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthenticated()


def role_required(*roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise Unauthenticated()
            if current_user.role not in roles:
                raise Forbidden()
            return f(*args, **kwargs)
        return decorated_function
    return decorator
