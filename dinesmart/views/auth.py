from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from .. import accounts
from ..models import Role
from ..schemas import (LoginInput, RegisterInput, ResetPasswordInput,
                       ResetRequestInput, parse)
from . import request_data

bp = Blueprint('auth', __name__, url_prefix='/api/auth')

RESET_MESSAGE = 'If account exists, reset link sent.'


@bp.post('/register')
def register():
    data = parse(RegisterInput, request_data())
    user = accounts.register(data.name, data.email, data.password, data.role)
    message = ('Seller registered - pending admin approval' if user.role == Role.SELLER
               else 'Customer registered successfully')
    return jsonify({'message': message, 'user': user.to_dict()}), 201


@bp.post('/login')
def login():
    data = parse(LoginInput, request_data())
    user, token = accounts.authenticate(data.email, data.password)
    return jsonify({
        'token': token,
        'id': user.id,
        'name': user.name,
        'role': user.role,
        'status': user.status,
    })


@bp.get('/me')
@login_required
def me():
    return jsonify(current_user.to_dict())


@bp.post('/request-reset')
def request_reset():
    data = parse(ResetRequestInput, request_data())
    token = accounts.request_password_reset(data.email)
    response = {'message': RESET_MESSAGE}
    if token and current_app.config['EXPOSE_RESET_TOKEN']:
        response['resetToken'] = token
    return jsonify(response)


@bp.post('/reset-password')
def reset_password():
    data = parse(ResetPasswordInput, request_data())
    accounts.reset_password(data.token, data.new_password)
    return jsonify({'message': 'Password reset successful'})
