# API Errors and JSON error handlers
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error converted to the {success, message, errors} envelope"""
    status_code = 400

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors

    def to_response(self):
        body = {'success': False, 'message': self.message}
        if self.errors:
            body['errors'] = self.errors
        return jsonify(body), self.status_code


class ValidationError(ApiError):
    status_code = 400

    def __init__(self, message='Validation errors', errors=None):
        super().__init__(message, errors=errors)


class StateConflictError(ApiError):
    """Operation is not valid for the entity's current status"""
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


def register_error_handlers(app):
    from landrental.models import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        db.session.rollback()
        return error.to_response()

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('Unhandled server error: %s', error)
        return jsonify({'success': False, 'message': 'Internal server error'}), 500
