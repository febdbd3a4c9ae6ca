# Authentication Routes
import logging
from datetime import datetime

from flask import Blueprint
from flask_login import login_required, current_user

from landrental.errors import ValidationError, AuthenticationError
from landrental.models import db, User
from landrental.schemas import RegisterRequest, LoginRequest
from landrental.utils.api import success, parse_body

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = parse_body(RegisterRequest)

    if User.query.filter_by(email=data.email).first():
        raise ValidationError('User already exists with this email')

    user = User(
        name=data.name,
        email=data.email,
        user_type=data.user_type,
        phone=data.phone,
    )
    if data.address:
        user.street = data.address.street
        user.city = data.address.city
        user.state = data.address.state
        user.pincode = data.address.pincode
    user.set_password(data.password)

    db.session.add(user)
    db.session.commit()
    logger.info('Registered %s %s', user.user_type, user.email)

    return success(
        {'user': user.to_private_dict(), 'token': user.generate_auth_token()},
        message='User registered successfully',
        status=201,
    )


@auth_bp.route('/login', methods=['POST'])
def login():
    data = parse_body(LoginRequest)

    user = User.query.filter_by(email=data.email.lower()).first()
    if not user or not user.check_password(data.password):
        raise AuthenticationError('Invalid email or password')
    if not user.is_active:
        raise AuthenticationError('Account is deactivated')

    user.last_login = datetime.utcnow()
    db.session.commit()

    return success(
        {'user': user.to_private_dict(), 'token': user.generate_auth_token()},
        message='Login successful',
    )


@auth_bp.route('/me')
@login_required
def me():
    return success({'user': current_user.to_private_dict()})
