from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .database import db


class DineSmartError(Exception):
    kind = 'internal'
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'error': self.kind, 'message': self.message}


class Unauthenticated(DineSmartError):
    kind = 'unauthenticated'
    status_code = 401
    default_message = 'Authorization required'


class Forbidden(DineSmartError):
    kind = 'forbidden'
    status_code = 403
    default_message = 'Access denied'


class NotFound(DineSmartError):
    kind = 'not_found'
    status_code = 404
    default_message = 'Not found'


class InvalidInput(DineSmartError):
    kind = 'invalid_input'
    status_code = 400
    default_message = 'Invalid input'


class InvalidItem(DineSmartError):
    kind = 'invalid_item'
    status_code = 422
    default_message = 'Order contains an invalid item'


class Conflict(DineSmartError):
    kind = 'conflict'
    status_code = 409
    default_message = 'Conflict'


_HTTP_KINDS = {
    400: InvalidInput.kind,
    401: Unauthenticated.kind,
    403: Forbidden.kind,
    404: NotFound.kind,
    409: Conflict.kind,
}


def register_error_handlers(app):
    @app.errorhandler(DineSmartError)
    def handle_dinesmart_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        kind = _HTTP_KINDS.get(error.code, error.name.lower().replace(' ', '_'))
        return jsonify({'error': kind, 'message': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        app.logger.exception('Database error: %s', error)
        return jsonify(DineSmartError().to_dict()), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return jsonify(DineSmartError().to_dict()), 500
