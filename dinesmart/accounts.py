import hashlib
import secrets

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from .database import db, utcnow
from .errors import Conflict, Forbidden, InvalidInput, Unauthenticated
from .models import PasswordReset, Role, User, UserStatus
from .security import create_token

STATUS_MESSAGES = {
    UserStatus.PENDING: 'Account pending admin approval',
    UserStatus.REJECTED: 'Account registration was rejected',
    UserStatus.SUSPENDED: 'Account suspended',
}


def email_taken(email):
    return User.query.filter_by(email=email).first() is not None


def register(name, email, password, role):
    if role not in (Role.SELLER, Role.CUSTOMER):
        raise InvalidInput('Role must be SELLER or CUSTOMER')
    if email_taken(email):
        raise Conflict('Email already registered')

    # Продавец ждёт одобрения администратора
    status = UserStatus.PENDING if role == Role.SELLER else UserStatus.APPROVED
    user = User(
        name=name,
        email=email,
        password=generate_password_hash(password),
        role=role,
        status=status,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Параллельная регистрация успела занять email после проверки
        db.session.rollback()
        raise Conflict('Email already registered')
    current_app.logger.info('Registered %s %s (status %s)', role, user.id, status)
    return user


def authenticate(email, password):
    user = User.query.filter_by(email=email).first()
    if user is None or not check_password_hash(user.password, password):
        raise Unauthenticated('Invalid login credentials')
    if user.status != UserStatus.APPROVED:
        raise Forbidden(STATUS_MESSAGES.get(user.status, 'Account is not active'))
    return user, create_token(user)


def _hash_token(token):
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def request_password_reset(email):
    """Create a single-use reset token for ``email``.

    Returns the raw token, or None when no account has that email. Only the
    SHA-256 hash of the token is stored.
    """
    user = User.query.filter_by(email=email).first()
    if user is None:
        return None

    raw_token = secrets.token_hex(32)
    db.session.add(PasswordReset(
        user_id=user.id,
        token_hash=_hash_token(raw_token),
        expires_at=utcnow() + current_app.config['RESET_TOKEN_TTL'],
    ))
    db.session.commit()
    current_app.logger.info('Password reset requested for user %s', user.id)
    return raw_token


def reset_password(token, new_password):
    now = utcnow()
    entry = PasswordReset.query.filter(PasswordReset.token_hash == _hash_token(token),
                                       PasswordReset.expires_at > now).first()
    if entry is None:
        raise InvalidInput('Invalid or expired token')

    user = db.session.get(User, entry.user_id)
    if user is None:
        raise InvalidInput('Invalid or expired token')
    user.password = generate_password_hash(new_password)
    db.session.delete(entry)
    PasswordReset.query.filter(PasswordReset.user_id == user.id,
                               PasswordReset.expires_at <= now)\
                       .delete(synchronize_session=False)
    db.session.commit()
    current_app.logger.info('Password reset completed for user %s', user.id)
    return user
