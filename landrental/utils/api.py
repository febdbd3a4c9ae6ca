# Request parsing and JSON response helpers
import math
from functools import wraps

from flask import jsonify, request
from flask_login import current_user
from pydantic import ValidationError as PydanticValidationError

from landrental.errors import ValidationError, AuthorizationError, NotFoundError
from landrental.models import db


def success(data=None, message=None, status=200):
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), status


def _itemize(error):
    items = []
    for err in error.errors():
        field = '.'.join(str(part) for part in err['loc']) or 'body'
        items.append({'field': field, 'message': err['msg']})
    return items


def parse_body(schema):
    """Validate the JSON body against a pydantic schema"""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(errors=[{'field': 'body', 'message': 'Request body must be a JSON object'}])
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(errors=_itemize(e))


def parse_query(schema):
    """Validate query-string parameters against a pydantic schema"""
    params = {k: v for k, v in request.args.items() if v != ''}
    try:
        return schema.model_validate(params)
    except PydanticValidationError as e:
        raise ValidationError(errors=_itemize(e))


def get_or_404(model, object_id, message):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFoundError(message)
    return obj


def pagination_meta(page, per_page, total):
    return {
        'currentPage': page,
        'totalPages': math.ceil(total / per_page) if per_page else 0,
        'totalItems': total,
        'itemsPerPage': per_page,
    }


def paginate_list(items, page, per_page):
    start = (page - 1) * per_page
    return items[start:start + per_page], pagination_meta(page, per_page, len(items))


def user_type_required(user_type):
    """Restrict a login_required view to one user type"""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_user.user_type != user_type:
                raise AuthorizationError(f'Access denied. Only {user_type}s can perform this action.')
            return view(*args, **kwargs)
        return wrapper
    return decorator
